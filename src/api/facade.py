# src/api/facade.py — v2
"""Public API facade.

Usage:
    from imgpress.api.facade import compress_batch
    response = await compress_batch(request)

Each entry point takes optional Settings; they are loaded from .env if None.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from imgpress.api.models import ImageAnalysisReport, ServiceConfig, SweepSummary
from imgpress.compression.classifier import classify_profile, read_metadata, suggestions_for
from imgpress.compression.profiles import profile_table_dump
from imgpress.compression.selector import select_config
from imgpress.compression.stage import target_format
from imgpress.config.settings import Settings, load_settings
from imgpress.core.models import CompressionProfile
from imgpress.pipeline.batch_pipeline import BatchPipeline
from imgpress.storage.layout import StorageLayout
from imgpress.storage.sweeper import RetentionSweeper

if TYPE_CHECKING:
    from pathlib import Path

    from imgpress.compression.png_encoder import BasePngEncoder
    from imgpress.pipeline.models import BatchRequest, BatchResponse

logger = logging.getLogger(__name__)


async def compress_batch(
    request: BatchRequest,
    settings: Settings | None = None,
    png_encoder: BasePngEncoder | None = None,
) -> BatchResponse:
    """Compress a batch of staged uploads.

    Args:
        request: Uploaded files plus the flat parameter set.
        settings: Global settings. Loaded from .env if None.
        png_encoder: PNG encoder. The pngquant adapter if None.

    Returns:
        One result per file, in submission order.
    """
    settings = settings or load_settings()
    pipeline = BatchPipeline(settings, png_encoder=png_encoder)
    return await pipeline.process(request)


async def analyze_image(path: Path) -> ImageAnalysisReport:
    """Inspect one image and recommend a config without compressing it.

    Raises:
        ImageReadError: If the image cannot be read.
    """
    metadata = await asyncio.to_thread(read_metadata, path)
    profile = classify_profile(metadata)
    config = select_config(profile, target_format(metadata.format), size_bytes=metadata.size_bytes)
    return ImageAnalysisReport(
        format=metadata.format,
        width=metadata.width,
        height=metadata.height,
        size=metadata.size_bytes,
        has_alpha=metadata.has_alpha,
        is_animated=metadata.is_animated,
        profile=profile.value,
        recommended_config=config,
        suggestions=suggestions_for(metadata, profile),
    )


async def trigger_sweep(settings: Settings | None = None) -> SweepSummary:
    """Run one retention sweep now and report what was deleted."""
    settings = settings or load_settings()
    sweeper = RetentionSweeper(
        StorageLayout.from_settings(settings),
        retention_seconds=settings.file_retention_seconds,
        interval_seconds=settings.cleanup_interval_seconds,
        exempt_names=settings.sweep_exempt_names_list,
    )
    report = await sweeper.sweep()
    return SweepSummary(
        deleted_count=report.deleted_count,
        deleted_files=report.deleted_files,
        message=report.message,
    )


def get_service_config(
    settings: Settings | None = None, pngquant_available: bool | None = None
) -> ServiceConfig:
    """Describe limits, retention policy and the base profile table."""
    settings = settings or load_settings()
    return ServiceConfig(
        supported_formats=settings.supported_formats_list,
        max_file_size_mb=settings.max_file_size_mb,
        max_files=settings.max_files,
        file_retention_minutes=round(settings.file_retention_seconds / 60),
        cleanup_interval_minutes=round(settings.cleanup_interval_seconds / 60),
        profiles=[p.value for p in CompressionProfile],
        compression_configs=profile_table_dump(),
        pngquant_available=pngquant_available,
    )
