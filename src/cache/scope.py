# src/cache/scope.py — v1
"""Format-scoped parameter sets used as the cache staleness key.

Each format gets its own fixed-field record holding only the parameters that
can change its output. Changing the JPEG quality therefore never invalidates a
plain PNG result, while a PNG that is converted to JPEG carries the JPEG
quality and is invalidated by it.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from imgpress.core.models import CompressionOptions, FitStrategy, ResizeMode

_MISSING = object()


class _ResizeScope(BaseModel):
    """Resize parameters shared by every format."""

    model_config = ConfigDict(frozen=True)

    resize_mode: ResizeMode
    resize_width: int
    resize_height: int
    skip_if_smaller: bool
    fit: FitStrategy


class PngScope(_ResizeScope):
    format: Literal["png"] = "png"
    lossy: bool
    pngquant_min: int
    pngquant_max: int
    pngquant_speed: int
    convert_to_jpeg: bool = False
    # Only set when convert_to_jpeg is True
    jpeg_quality: int | None = None


class JpegScope(_ResizeScope):
    format: Literal["jpeg"] = "jpeg"
    jpeg_quality: int


class WebpScope(_ResizeScope):
    format: Literal["webp"] = "webp"
    webp_quality: int


class GenericScope(_ResizeScope):
    """Every parameter, for formats without a dedicated scope (e.g. BMP)."""

    format: Literal["other"] = "other"
    lossy: bool
    pngquant_min: int
    pngquant_max: int
    pngquant_speed: int
    jpeg_quality: int
    webp_quality: int


ParameterScope = Annotated[
    Union[PngScope, JpegScope, WebpScope, GenericScope],
    Field(discriminator="format"),
]


def _resize_fields(options: CompressionOptions) -> dict:
    return {
        "resize_mode": options.resize_mode,
        "resize_width": options.resize_width,
        "resize_height": options.resize_height,
        "skip_if_smaller": options.skip_if_smaller,
        "fit": options.fit,
    }


def build_scope(
    file_format: str,
    options: CompressionOptions,
    convert_to_jpeg: bool = False,
) -> PngScope | JpegScope | WebpScope | GenericScope:
    """Derive the minimal parameter scope for one file's declared format.

    Args:
        file_format: Canonical format of the file (png, jpeg, webp, ...).
        options: Current global compression options.
        convert_to_jpeg: Per-file PNG→JPEG override. Ignored for non-PNG files.

    Returns:
        The format-specific scope record.
    """
    resize = _resize_fields(options)

    if file_format == "png":
        return PngScope(
            lossy=options.lossy,
            pngquant_min=options.pngquant_min,
            pngquant_max=options.pngquant_max,
            pngquant_speed=options.pngquant_speed,
            convert_to_jpeg=convert_to_jpeg,
            jpeg_quality=options.jpeg_quality if convert_to_jpeg else None,
            **resize,
        )
    if file_format == "jpeg":
        return JpegScope(jpeg_quality=options.jpeg_quality, **resize)
    if file_format == "webp":
        return WebpScope(webp_quality=options.webp_quality, **resize)

    return GenericScope(
        lossy=options.lossy,
        pngquant_min=options.pngquant_min,
        pngquant_max=options.pngquant_max,
        pngquant_speed=options.pngquant_speed,
        jpeg_quality=options.jpeg_quality,
        webp_quality=options.webp_quality,
        **resize,
    )


def is_stale(current: ParameterScope, cached: ParameterScope | None) -> bool:
    """Return True when a file must be recompressed.

    A missing cached scope is always stale; otherwise the scopes are compared
    structurally, and a different record type counts as a mismatch.
    """
    if cached is None:
        return True
    return current != cached


def changed_keys(current: ParameterScope, cached: ParameterScope | None) -> list[str]:
    """List parameter names that differ between two scopes (for logging)."""
    if cached is None:
        return sorted(current.model_dump().keys())
    a = current.model_dump()
    b = cached.model_dump()
    return sorted(k for k in a.keys() | b.keys() if a.get(k, _MISSING) != b.get(k, _MISSING))

