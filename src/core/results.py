# src/core/results.py — v1
"""Per-file compression result returned by the batch pipeline.

A result is created once per (file, parameter scope) pair and never mutated;
reprocessing a file under a new scope produces a new result.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from imgpress.core.models import ResizeMode


class OriginalInfo(BaseModel):
    """The uploaded image as the user submitted it."""

    model_config = ConfigDict(frozen=True)

    filename: str
    size: int
    dimensions: str
    format: str


class CompressedInfo(BaseModel):
    """The compressed artifact."""

    model_config = ConfigDict(frozen=True)

    filename: str
    size: int
    compression_ratio: float


class ResizedInfo(BaseModel):
    """The intermediate resized artifact, when resizing took place."""

    model_config = ConfigDict(frozen=True)

    filename: str
    size: int
    dimensions: str
    resized_url: str


class CompressionResult(BaseModel):
    """Outcome for one file: either the success shape or a failure with error."""

    model_config = ConfigDict(frozen=True)

    success: bool
    filename: str
    error: str | None = None
    converted_to_jpeg: bool = False
    resize_mode: ResizeMode = "keep"
    profile: str | None = None
    original: OriginalInfo | None = None
    compressed: CompressedInfo | None = None
    resized: ResizedInfo | None = None
    download_url: str | None = None
    original_url: str | None = None
    from_cache: bool = False

    @classmethod
    def failure(cls, filename: str, error: str) -> CompressionResult:
        """Build a failure entry. The error must already be sanitized."""
        return cls(success=False, filename=filename, error=error)

    @property
    def ratio(self) -> float | None:
        """Compression ratio in percent, negative when the output grew."""
        if self.compressed is None:
            return None
        return self.compressed.compression_ratio


def compression_ratio(original_bytes: int, compressed_bytes: int) -> float:
    """Return (original - compressed) / original as a percentage, 2 decimals.

    Negative values are valid output (the compressed file is larger).
    """
    if original_bytes <= 0:
        return 0.0
    return round((original_bytes - compressed_bytes) / original_bytes * 100, 2)
