# src/api/models.py — v2
"""API-level models: ImageAnalysisReport, ServiceConfig, SweepSummary."""

from __future__ import annotations

from pydantic import BaseModel, Field

from imgpress.compression.profiles import EncoderConfig
from imgpress.storage.models import DeletedArtifact


class ImageAnalysisReport(BaseModel):
    """Return value of facade.analyze_image()."""

    format: str
    width: int
    height: int
    size: int
    has_alpha: bool
    is_animated: bool
    profile: str
    recommended_config: EncoderConfig
    suggestions: list[str] = Field(default_factory=list)


class ServiceConfig(BaseModel):
    """Read-only service limits and defaults, for client display only."""

    supported_formats: list[str]
    max_file_size_mb: int
    max_files: int
    file_retention_minutes: int
    cleanup_interval_minutes: int
    profiles: list[str]
    compression_configs: dict[str, dict[str, dict]]
    pngquant_available: bool | None = None


class SweepSummary(BaseModel):
    """Return value of facade.trigger_sweep()."""

    success: bool = True
    deleted_count: int
    deleted_files: list[DeletedArtifact] = Field(default_factory=list)
    message: str
