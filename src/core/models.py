# src/core/models.py — v1
"""Shared value types: image formats, profiles, metadata, compression options."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

ImageFormat = Literal["png", "jpeg", "webp", "bmp"]
ResizeMode = Literal["keep", "custom", "maxWidth", "maxHeight"]
FitStrategy = Literal["cover", "contain", "fill"]

# Pillow format names and file extensions mapped to canonical format names
_PIL_FORMATS: dict[str, str] = {
    "PNG": "png",
    "JPEG": "jpeg",
    "MPO": "jpeg",
    "WEBP": "webp",
    "BMP": "bmp",
}

_EXTENSIONS: dict[str, str] = {
    ".png": "png",
    ".jpg": "jpeg",
    ".jpeg": "jpeg",
    ".webp": "webp",
    ".bmp": "bmp",
}

# Formats that cannot carry an alpha channel
OPAQUE_FORMATS = frozenset({"jpeg", "bmp"})


class CompressionProfile(str, Enum):
    """Coarse content-type classification driving default encoder parameters."""

    PHOTO = "photo"
    GRAPHICS = "graphics"
    SCREENSHOT = "screenshot"
    HIGH_QUALITY = "highQuality"


class ImageMetadata(BaseModel):
    """Inspected properties of one image file."""

    model_config = ConfigDict(frozen=True)

    format: str
    width: int
    height: int
    channels: int
    has_alpha: bool
    size_bytes: int
    is_animated: bool = False
    color_mode: str = ""

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def dimensions(self) -> str:
        """Return 'WIDTHxHEIGHT'."""
        return f"{self.width}x{self.height}"


class CompressionOptions(BaseModel):
    """Flat per-request parameter set chosen by the user.

    Defaults match what the batch endpoint assumes for absent fields.
    """

    model_config = ConfigDict(frozen=True)

    # PNG
    lossy: bool = True
    pngquant_min: int = Field(default=60, ge=0, le=100)
    pngquant_max: int = Field(default=80, ge=0, le=100)
    pngquant_speed: int = Field(default=3, ge=1, le=11)
    # JPEG / WebP
    jpeg_quality: int = Field(default=80, ge=1, le=100)
    webp_quality: int = Field(default=80, ge=1, le=100)
    # Resize
    resize_mode: ResizeMode = "keep"
    resize_width: int = Field(default=300, ge=1)
    resize_height: int = Field(default=200, ge=1)
    skip_if_smaller: bool = False
    fit: FitStrategy = "cover"

    @model_validator(mode="after")
    def validate_quality_range(self) -> CompressionOptions:
        if self.pngquant_min > self.pngquant_max:
            raise ValueError("pngquant_min must be <= pngquant_max")
        return self


def normalize_format(name: str | None) -> str:
    """Map a Pillow format name, MIME type or extension to a canonical format.

    Unrecognized input is returned lower-cased so callers can still fall back.
    """
    if not name:
        return "unknown"
    raw = name.strip()
    if raw.upper() in _PIL_FORMATS:
        return _PIL_FORMATS[raw.upper()]
    lowered = raw.lower()
    if lowered.startswith("image/"):
        lowered = lowered.split("/", 1)[1]
        if lowered == "jpg":
            return "jpeg"
        return lowered
    if lowered in _EXTENSIONS:
        return _EXTENSIONS[lowered]
    if f".{lowered}" in _EXTENSIONS:
        return _EXTENSIONS[f".{lowered}"]
    return lowered


def format_from_filename(filename: str) -> str:
    """Guess the canonical format from a file name's extension."""
    dot = filename.rfind(".")
    if dot < 0:
        return "unknown"
    return _EXTENSIONS.get(filename[dot:].lower(), "unknown")
