# src/resize/stage.py — v1
"""ResizeStage: optional geometric transform before compression.

Target dimensions by mode:

  keep       → no resize
  custom     → (width, height) with the requested fit
  maxWidth   → width capped, height from aspect ratio, fit forced to contain
  maxHeight  → height capped, width from aspect ratio, fit forced to contain

With skip_if_smaller, maxWidth/maxHeight leave a source that already fits
within the target box on both axes untouched (equality counts as fitting).
custom always resizes to the requested box, enlarging if needed.
"""

from __future__ import annotations

import asyncio
import logging
import math
from pathlib import Path
from typing import Literal

from PIL import Image, ImageOps
from pydantic import BaseModel

from imgpress.core.errors import sanitize_error
from imgpress.core.models import OPAQUE_FORMATS, CompressionOptions, FitStrategy, ResizeMode

logger = logging.getLogger(__name__)

INTERMEDIATE_QUALITY = 95

OPAQUE_WHITE = (255, 255, 255, 255)
TRANSPARENT = (0, 0, 0, 0)


class ResizeOutcome(BaseModel):
    """What the resize stage did with one file."""

    status: Literal["resized", "skipped", "failed"]
    path: Path
    width: int
    height: int
    size_bytes: int = 0
    reason: str | None = None

    @property
    def dimensions(self) -> str:
        return f"{self.width}x{self.height}"


def _round_half_up(value: float) -> int:
    return max(1, math.floor(value + 0.5))


def compute_target(
    mode: ResizeMode,
    src_width: int,
    src_height: int,
    width: int,
    height: int,
    skip_if_smaller: bool = False,
) -> tuple[int, int] | None:
    """Return the target (width, height), or None when no resize applies."""
    if mode == "keep" or src_width <= 0 or src_height <= 0:
        return None

    if mode == "custom":
        target = (width, height)
    elif mode == "maxWidth":
        target = (width, _round_half_up(src_height * width / src_width))
    elif mode == "maxHeight":
        target = (_round_half_up(src_width * height / src_height), height)
    else:
        raise ValueError(f"Unknown resize mode: {mode}")

    fits = src_width <= target[0] and src_height <= target[1]
    if skip_if_smaller and mode != "custom" and fits:
        return None
    return target


def resolve_fit(mode: ResizeMode, fit: FitStrategy) -> FitStrategy:
    if mode in ("maxWidth", "maxHeight"):
        return "contain"
    return fit


def background_for(target_format: str) -> tuple[int, int, int, int]:
    """Letterbox fill: opaque white for formats without alpha."""
    return OPAQUE_WHITE if target_format in OPAQUE_FORMATS else TRANSPARENT


def render(img: Image.Image, size: tuple[int, int], fit: FitStrategy, background) -> Image.Image:
    """Resize a decoded image according to the fit strategy."""
    if img.mode in ("P", "1"):
        img = img.convert("RGBA")
    if fit == "cover":
        return ImageOps.fit(img, size, method=Image.Resampling.LANCZOS)
    if fit == "fill":
        return img.resize(size, Image.Resampling.LANCZOS)

    # contain: scale to fit inside, centre on a canvas of the exact size
    inner = ImageOps.contain(img, size, method=Image.Resampling.LANCZOS)
    if inner.size == size:
        return inner
    opaque = background[3] == 255
    canvas = Image.new("RGB" if opaque else "RGBA", size, background[:3] if opaque else background)
    if inner.mode not in ("RGB", "RGBA"):
        inner = inner.convert("RGBA")
    offset = ((size[0] - inner.width) // 2, (size[1] - inner.height) // 2)
    canvas.paste(inner, offset, inner if inner.mode == "RGBA" else None)
    return canvas


def _save_like_source(img: Image.Image, dst: Path, source_format: str | None) -> None:
    fmt = source_format or "PNG"
    params: dict = {}
    if fmt in ("JPEG", "WEBP"):
        params["quality"] = INTERMEDIATE_QUALITY
    if fmt in ("JPEG", "BMP") and img.mode not in ("RGB", "L"):
        img = img.convert("RGB")
    img.save(dst, format=fmt, **params)


class ResizeStage:
    """Produce the resized intermediate artifact for one upload."""

    def _resize(
        self, src: Path, dst: Path, options: CompressionOptions, target_format: str
    ) -> ResizeOutcome:
        with Image.open(src) as img:
            img.load()
            source_format = img.format
            target = compute_target(
                options.resize_mode,
                img.width,
                img.height,
                options.resize_width,
                options.resize_height,
                options.skip_if_smaller,
            )
            if target is None:
                return ResizeOutcome(
                    status="skipped",
                    path=src,
                    width=img.width,
                    height=img.height,
                    size_bytes=src.stat().st_size,
                    reason="already within target size" if options.resize_mode != "keep" else "keep",
                )

            fit = resolve_fit(options.resize_mode, options.fit)
            out = render(img, target, fit, background_for(target_format))
            _save_like_source(out, dst, source_format)

        logger.info(
            "Resized %dx%d → %dx%d (%s, %s)",
            img.width, img.height, target[0], target[1], options.resize_mode, fit,
        )
        return ResizeOutcome(
            status="resized",
            path=dst,
            width=target[0],
            height=target[1],
            size_bytes=dst.stat().st_size,
        )

    async def apply(
        self, src: Path, dst: Path, options: CompressionOptions, target_format: str
    ) -> ResizeOutcome:
        """Resize src into dst.

        A failed resize is reported, not raised; callers fall back to the
        original upload.
        """
        src, dst = Path(src), Path(dst)
        try:
            return await asyncio.to_thread(self._resize, src, dst, options, target_format)
        except (OSError, ValueError) as exc:
            logger.warning("Resize failed, using original: %s", exc)
            return ResizeOutcome(
                status="failed", path=src, width=0, height=0, reason=sanitize_error(str(exc)),
            )
