# src/compression/classifier.py — v1
"""Image inspection and compression-profile classification.

classify_profile() is a pure function of the metadata; rules are applied per
format, first match wins:

  jpeg  → photo
  png   → alpha → graphics
          dense (> 3 bytes/pixel) and small (< 500k pixels) → graphics
          larger than 1920x1080 on either side → screenshot
          otherwise → graphics
  webp  → highQuality
  other → photo
"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from imgpress.core.errors import ImageReadError
from imgpress.core.models import CompressionProfile, ImageMetadata, normalize_format

logger = logging.getLogger(__name__)

# Empirical thresholds carried over unchanged from the production heuristics.
DENSE_BYTES_PER_PIXEL = 3
SMALL_PIXEL_COUNT = 500_000
SCREEN_WIDTH = 1920
SCREEN_HEIGHT = 1080


def read_metadata(path: Path) -> ImageMetadata:
    """Inspect an image file without decoding its pixel data.

    Raises:
        ImageReadError: If the file is missing, unreadable or not an image.
    """
    path = Path(path)
    try:
        size_bytes = path.stat().st_size
        with Image.open(path) as img:
            bands = img.getbands()
            has_alpha = "A" in bands or "transparency" in img.info
            return ImageMetadata(
                format=normalize_format(img.format),
                width=img.width,
                height=img.height,
                channels=len(bands),
                has_alpha=has_alpha,
                size_bytes=size_bytes,
                is_animated=getattr(img, "n_frames", 1) > 1,
                color_mode=img.mode,
            )
    except UnidentifiedImageError as exc:
        raise ImageReadError(f"Unsupported or corrupt image: {path}") from exc
    except OSError as exc:
        raise ImageReadError(f"Cannot read image {path}: {exc.strerror or exc}") from exc


def classify_profile(metadata: ImageMetadata) -> CompressionProfile:
    """Assign a compression profile. Never fails; unknown input → photo."""
    fmt = metadata.format

    if fmt == "jpeg":
        return CompressionProfile.PHOTO

    if fmt == "png":
        if metadata.has_alpha:
            return CompressionProfile.GRAPHICS

        pixels = metadata.pixel_count
        bytes_per_pixel = metadata.size_bytes / pixels if pixels > 0 else float("inf")
        if bytes_per_pixel > DENSE_BYTES_PER_PIXEL and pixels < SMALL_PIXEL_COUNT:
            return CompressionProfile.GRAPHICS

        if metadata.width > SCREEN_WIDTH or metadata.height > SCREEN_HEIGHT:
            return CompressionProfile.SCREENSHOT

        return CompressionProfile.GRAPHICS

    if fmt == "webp":
        return CompressionProfile.HIGH_QUALITY

    return CompressionProfile.PHOTO


def suggestions_for(metadata: ImageMetadata, profile: CompressionProfile) -> list[str]:
    """Human-readable hints shown next to an analysis report."""
    hints: list[str] = []

    if metadata.format == "png" and not metadata.has_alpha and metadata.size_bytes > 1024 * 1024:
        hints.append("Convert to JPEG for a better compression ratio")

    if metadata.format == "jpeg" and metadata.size_bytes > 5 * 1024 * 1024:
        hints.append("Large JPEG: consider lowering quality to 75-80")

    if metadata.width > 2048 or metadata.height > 2048:
        hints.append("Large dimensions: consider resizing before compressing")

    if profile is CompressionProfile.GRAPHICS and metadata.format == "png":
        hints.append("Icon-like graphic: palette optimisation is recommended")

    return hints
