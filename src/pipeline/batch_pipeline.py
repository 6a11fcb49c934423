# src/pipeline/batch_pipeline.py — v1
"""Batch pipeline: per-file resize then compress, results in submission order.

For each uploaded file:
  1. Read original metadata (reported to the caller as-is)
  2. Resize into the resized area when resize_mode != keep
     (skipped or failed resize falls through to the original)
  3. Compress the resize output, or the original, into the compressed area
  4. Build a CompressionResult with ratio measured against the original upload

No failure in one file aborts its siblings. Files run one at a time unless
batch_max_concurrency allows more; result order never changes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from imgpress.compression.classifier import read_metadata
from imgpress.compression.stage import CompressionStage, output_extension, target_format
from imgpress.core.errors import sanitize_error
from imgpress.core.results import (
    CompressedInfo,
    CompressionResult,
    OriginalInfo,
    ResizedInfo,
    compression_ratio,
)
from imgpress.logging.context import set_file_context, set_request_context, set_stage
from imgpress.pipeline.models import BatchRequest, BatchResponse, UploadedImage
from imgpress.resize.stage import ResizeStage
from imgpress.storage.layout import StorageLayout

if TYPE_CHECKING:
    from imgpress.compression.png_encoder import BasePngEncoder
    from imgpress.config.settings import Settings
    from imgpress.core.models import CompressionOptions

logger = logging.getLogger(__name__)


class BatchPipeline:
    """Process batch compression requests.

    Usage:
        pipeline = BatchPipeline(settings)
        response = await pipeline.process(BatchRequest(files=[...]))
    """

    def __init__(
        self,
        settings: Settings,
        png_encoder: BasePngEncoder | None = None,
        layout: StorageLayout | None = None,
    ) -> None:
        if png_encoder is None:
            from imgpress.compression.pngquant import PngquantEncoder

            png_encoder = PngquantEncoder(
                binary=settings.pngquant_path or None,
                timeout_s=settings.pngquant_timeout,
            )
        self._settings = settings
        self._layout = layout or StorageLayout.from_settings(settings)
        self._compression = CompressionStage(png_encoder)
        self._resize = ResizeStage()
        self._max_concurrency = settings.batch_max_concurrency

    @property
    def layout(self) -> StorageLayout:
        return self._layout

    async def process(self, request: BatchRequest) -> BatchResponse:
        """Process every file of the request; never raises for per-file failures."""
        set_request_context(request.request_id)
        self._layout.ensure_directories()
        logger.info("Batch %s: %d files", request.request_id, len(request.files))

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def guarded(upload: UploadedImage) -> CompressionResult:
            async with semaphore:
                return await self._process_one(upload, request)

        results = await asyncio.gather(*(guarded(f) for f in request.files))
        response = BatchResponse(request_id=request.request_id, results=list(results))
        logger.info(
            "Batch %s done: %d succeeded, %d failed",
            request.request_id, response.succeeded, response.failed,
        )
        return response

    async def _process_one(self, upload: UploadedImage, request: BatchRequest) -> CompressionResult:
        set_file_context(upload.original_name, stage="inspect")
        try:
            return await self._run_file(upload, request.options, request.should_convert(upload.original_name))
        except Exception as exc:
            logger.error("File failed: %s", exc)
            return CompressionResult.failure(upload.original_name, sanitize_error(str(exc)))
        finally:
            set_stage(None)

    async def _run_file(
        self, upload: UploadedImage, options: CompressionOptions, convert_flag: bool
    ) -> CompressionResult:
        original = await asyncio.to_thread(read_metadata, upload.stored_path)
        fmt = target_format(original.format, convert_flag)
        converted = convert_flag and original.format == "png"

        input_path = upload.stored_path
        resized_info: ResizedInfo | None = None
        if options.resize_mode != "keep":
            set_stage("resize")
            resized_path = self._layout.resized_path(upload.stored_name)
            outcome = await self._resize.apply(input_path, resized_path, options, fmt)
            if outcome.status == "resized":
                resized_info = ResizedInfo(
                    filename=resized_path.name,
                    size=outcome.size_bytes,
                    dimensions=outcome.dimensions,
                    resized_url=self._layout.resized_url(resized_path.name),
                )
                input_path = outcome.path
            else:
                logger.info("Resize %s, compressing original: %s", outcome.status, outcome.reason)

        set_stage("compress")
        extension = output_extension(fmt) if fmt != original.format else None
        output_path = self._layout.compressed_path(upload.stored_name, extension)
        outcome = await self._compression.compress(input_path, output_path, options, converted)
        if not outcome.success:
            return CompressionResult.failure(upload.original_name, outcome.error or "Compression failed")

        ratio = compression_ratio(original.size_bytes, outcome.output_size)
        logger.info(
            "Compressed %s with %s (%.2f%%)", upload.original_name, outcome.method, ratio,
            extra={"data": {"profile": outcome.profile, "method": outcome.method, "ratio": ratio}},
        )
        return CompressionResult(
            success=True,
            filename=upload.original_name,
            converted_to_jpeg=converted,
            resize_mode=options.resize_mode,
            profile=outcome.profile,
            original=OriginalInfo(
                filename=upload.original_name,
                size=original.size_bytes,
                dimensions=original.dimensions,
                format=original.format.upper(),
            ),
            compressed=CompressedInfo(
                filename=output_path.name,
                size=outcome.output_size,
                compression_ratio=ratio,
            ),
            resized=resized_info,
            download_url=self._layout.compressed_url(output_path.name),
            original_url=self._layout.upload_url(upload.stored_name),
        )
