# src/compression/selector.py — v1
"""ConfigSelector: (profile, format, overrides, size) → EncoderConfig."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from imgpress.compression.profiles import (
    DEFAULT_JPEG_CONFIG,
    PROFILE_TABLE,
    JpegConfig,
    PngConfig,
    WebpConfig,
)
from imgpress.core.models import CompressionOptions, CompressionProfile

LARGE_FILE_BYTES = 10 * 1024 * 1024
LARGE_FILE_QUALITY_STEP = 10
QUALITY_FLOOR = 60


class EncoderOverrides(BaseModel):
    """User-supplied values that replace base-table fields unconditionally."""

    model_config = ConfigDict(frozen=True)

    quality: int | None = None
    jpeg_quality: int | None = None
    webp_quality: int | None = None
    lossy: bool | None = None

    @classmethod
    def from_options(cls, options: CompressionOptions) -> EncoderOverrides:
        return cls(
            jpeg_quality=options.jpeg_quality,
            webp_quality=options.webp_quality,
            lossy=options.lossy,
        )


def base_config(
    profile: CompressionProfile, target_format: str
) -> JpegConfig | PngConfig | WebpConfig:
    """Look up the base config, falling back to photo, then to default JPEG."""
    config = PROFILE_TABLE.get(profile, {}).get(target_format)
    if config is None:
        config = PROFILE_TABLE[CompressionProfile.PHOTO].get(target_format)
    if config is None:
        config = DEFAULT_JPEG_CONFIG
    return config


def select_config(
    profile: CompressionProfile,
    target_format: str,
    overrides: EncoderOverrides | None = None,
    size_bytes: int = 0,
) -> JpegConfig | PngConfig | WebpConfig:
    """Resolve a complete encoder config for one file.

    Overrides apply first; the large-file quality decrement is applied after
    them and clamped at QUALITY_FLOOR. The shared base table is never mutated.
    """
    config = base_config(profile, target_format)
    overrides = overrides or EncoderOverrides()
    update: dict = {}

    if overrides.quality is not None:
        update["quality"] = overrides.quality
    if isinstance(config, JpegConfig) and overrides.jpeg_quality is not None:
        update["quality"] = overrides.jpeg_quality
    if isinstance(config, WebpConfig) and overrides.webp_quality is not None:
        update["quality"] = overrides.webp_quality
    if isinstance(config, PngConfig) and overrides.lossy is not None:
        update["palette"] = overrides.lossy

    quality = update.get("quality", config.quality)
    if size_bytes > LARGE_FILE_BYTES and quality is not None:
        update["quality"] = max(quality - LARGE_FILE_QUALITY_STEP, QUALITY_FLOOR)

    return config.model_copy(update=update) if update else config
