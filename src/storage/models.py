# src/storage/models.py — v2
"""Storage domain models: StorageArea, DeletedArtifact, SweepReport."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

StorageArea = Literal["upload", "compressed", "resized"]


class DeletedArtifact(BaseModel):
    """One file removed by a retention sweep."""

    area: StorageArea
    filename: str
    age_minutes: int


class SweepReport(BaseModel):
    """Outcome of a single retention sweep."""

    deleted_count: int = 0
    deleted_files: list[DeletedArtifact] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    swept_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def message(self) -> str:
        return f"Cleanup finished, {self.deleted_count} expired files deleted"
