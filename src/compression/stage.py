# src/compression/stage.py — v1
"""CompressionStage: classify, select config, encode, measure.

JPEG and WebP are encoded in-process; PNG goes through the injected PNG
encoder. Every failure is returned as an unsuccessful StageOutcome with a
path-sanitized message.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from pydantic import BaseModel

from imgpress.compression.classifier import classify_profile, read_metadata
from imgpress.compression.encoders import encode_jpeg, encode_webp
from imgpress.compression.png_encoder import BasePngEncoder, PngquantOptions
from imgpress.compression.profiles import EncoderConfig, PngConfig, WebpConfig
from imgpress.compression.selector import EncoderOverrides, select_config
from imgpress.core.errors import EncoderError, sanitize_error
from imgpress.core.models import CompressionOptions, ImageMetadata
from imgpress.core.results import compression_ratio

logger = logging.getLogger(__name__)

_ENCODED_FORMATS = frozenset({"png", "jpeg", "webp"})
_EXTENSIONS = {"png": ".png", "jpeg": ".jpg", "webp": ".webp"}


class StageOutcome(BaseModel):
    """Result of compressing one input file."""

    success: bool
    input_size: int = 0
    output_size: int = 0
    compression_ratio: float = 0.0
    profile: str | None = None
    target_format: str | None = None
    method: str | None = None
    config: EncoderConfig | None = None
    metadata: ImageMetadata | None = None
    error: str | None = None


def target_format(source_format: str, convert_to_jpeg: bool = False) -> str:
    """Format the output is encoded in.

    PNG→JPEG conversion applies only to PNG sources; formats without a
    dedicated encoder (BMP) are encoded as JPEG.
    """
    if convert_to_jpeg and source_format == "png":
        return "jpeg"
    if source_format in _ENCODED_FORMATS:
        return source_format
    return "jpeg"


def output_extension(fmt: str) -> str:
    return _EXTENSIONS.get(fmt, ".jpg")


class CompressionStage:
    """Compress single images with the encoder matching their target format."""

    def __init__(self, png_encoder: BasePngEncoder) -> None:
        self._png_encoder = png_encoder

    async def compress(
        self,
        input_path: Path,
        output_path: Path,
        options: CompressionOptions,
        convert_to_jpeg: bool = False,
    ) -> StageOutcome:
        """Compress input_path into output_path.

        Args:
            input_path: Original upload, or the resized artifact.
            output_path: Destination; its extension should match the target format.
            options: Per-request compression parameters.
            convert_to_jpeg: Per-file PNG→JPEG flag.
        """
        metadata: ImageMetadata | None = None
        try:
            metadata = await asyncio.to_thread(read_metadata, input_path)
            profile = classify_profile(metadata)
            fmt = target_format(metadata.format, convert_to_jpeg)
            config = select_config(
                profile, fmt, EncoderOverrides.from_options(options), metadata.size_bytes,
            )

            if isinstance(config, PngConfig):
                output_size, method = await self._encode_png(input_path, output_path, options)
            elif isinstance(config, WebpConfig):
                output_size = await asyncio.to_thread(encode_webp, input_path, output_path, config)
                method = "pillow-webp"
            else:
                output_size = await asyncio.to_thread(encode_jpeg, input_path, output_path, config)
                method = "pillow-jpeg"

        except Exception as exc:
            logger.warning("Compression failed: %s", exc, exc_info=True)
            return StageOutcome(success=False, metadata=metadata, error=sanitize_error(str(exc)))

        ratio = compression_ratio(metadata.size_bytes, output_size)
        logger.debug(
            "Compressed %s → %s with %s: %d → %d bytes (%.2f%%)",
            metadata.format, fmt, method, metadata.size_bytes, output_size, ratio,
        )
        return StageOutcome(
            success=True,
            input_size=metadata.size_bytes,
            output_size=output_size,
            compression_ratio=ratio,
            profile=profile.value,
            target_format=fmt,
            method=method,
            config=config,
            metadata=metadata,
        )

    async def _encode_png(
        self, input_path: Path, output_path: Path, options: CompressionOptions
    ) -> tuple[int, str]:
        result = await self._png_encoder.compress(
            Path(input_path), Path(output_path), PngquantOptions.from_options(options),
        )
        if not result.success:
            raise EncoderError(f"pngquant compression failed: {result.error}")
        return result.output_size, self._png_encoder.name
