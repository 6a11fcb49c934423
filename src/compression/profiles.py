# src/compression/profiles.py — v1
"""Encoder configuration records and the profile × format base table."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from imgpress.core.models import CompressionProfile


class JpegConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["jpeg"] = "jpeg"
    quality: int = 85
    progressive: bool = True
    mozjpeg: bool = True
    optimize_scans: bool = False


class PngConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["png"] = "png"
    compression_level: int = 9
    adaptive_filtering: bool = True
    palette: bool = True
    quality: int | None = None


class WebpConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["webp"] = "webp"
    quality: int = 85
    effort: int = 6
    smart_subsample: bool = False
    lossless: bool = False


EncoderConfig = Annotated[
    Union[JpegConfig, PngConfig, WebpConfig],
    Field(discriminator="kind"),
]

# Used when neither the profile nor the photo profile has a config for a format.
DEFAULT_JPEG_CONFIG = JpegConfig(quality=85, progressive=True, mozjpeg=True)

PROFILE_TABLE: dict[CompressionProfile, dict[str, JpegConfig | PngConfig | WebpConfig]] = {
    CompressionProfile.PHOTO: {
        "jpeg": JpegConfig(quality=85, progressive=True, mozjpeg=True, optimize_scans=True),
        "webp": WebpConfig(quality=85, effort=6, smart_subsample=True),
    },
    CompressionProfile.GRAPHICS: {
        "png": PngConfig(compression_level=9, adaptive_filtering=True, palette=True, quality=80),
        "webp": WebpConfig(quality=90, effort=6, lossless=False),
    },
    CompressionProfile.SCREENSHOT: {
        "png": PngConfig(compression_level=8, adaptive_filtering=True, palette=False, quality=75),
        "jpeg": JpegConfig(quality=80, progressive=True, mozjpeg=True),
    },
    CompressionProfile.HIGH_QUALITY: {
        "jpeg": JpegConfig(quality=95, progressive=True, mozjpeg=True),
        "png": PngConfig(compression_level=9, adaptive_filtering=True, palette=False),
        "webp": WebpConfig(quality=95, effort=6),
    },
}


def profile_table_dump() -> dict[str, dict[str, dict]]:
    """The base table as plain data, for read-only display."""
    return {
        profile.value: {fmt: cfg.model_dump(exclude={"kind"}) for fmt, cfg in formats.items()}
        for profile, formats in PROFILE_TABLE.items()
    }
