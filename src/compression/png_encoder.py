# src/compression/png_encoder.py — v1
"""PNG encoder capability interface.

PNG output is produced by an external quantizer only; there is no in-process
fallback. Tests substitute an in-process double for the production adapter.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

from imgpress.core.models import CompressionOptions

LOSSLESS_QUALITY = "100"


class PngquantOptions(BaseModel):
    """Quantizer invocation parameters."""

    model_config = ConfigDict(frozen=True)

    quality_min: int = Field(default=60, ge=0, le=100)
    quality_max: int = Field(default=80, ge=0, le=100)
    speed: int = Field(default=3, ge=1, le=11)
    lossy: bool = True
    strip: bool = True
    force: bool = True
    skip_if_larger: bool = False
    posterize: int = Field(default=0, ge=0, le=8)
    nofs: bool = False

    @model_validator(mode="after")
    def validate_range(self) -> PngquantOptions:
        if self.quality_min > self.quality_max:
            raise ValueError("quality_min must be <= quality_max")
        return self

    @classmethod
    def from_options(cls, options: CompressionOptions) -> PngquantOptions:
        return cls(
            quality_min=options.pngquant_min,
            quality_max=options.pngquant_max,
            speed=options.pngquant_speed,
            lossy=options.lossy,
        )

    @property
    def quality_arg(self) -> str:
        """Quality range, pinned to maximum in lossless mode."""
        if not self.lossy:
            return LOSSLESS_QUALITY
        return f"{self.quality_min}-{self.quality_max}"

    @property
    def dithering_disabled(self) -> bool:
        return self.nofs or not self.lossy


class PngEncodeResult(BaseModel):
    """Outcome of one quantizer run. Failures are values, not exceptions."""

    success: bool
    input_size: int = 0
    output_size: int = 0
    command: list[str] = Field(default_factory=list)
    stderr: str = ""
    error: str | None = None


class BasePngEncoder(ABC):
    """Encode a PNG file to a new PNG file."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Short encoder identifier reported as the compression method."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Return True if the encoder can run in this environment."""

    @abstractmethod
    async def compress(
        self, input_path: Path, output_path: Path, options: PngquantOptions
    ) -> PngEncodeResult:
        """Quantize input_path into output_path.

        Raises:
            QuantizerNotFoundError: If the encoder is not installed.
        """
