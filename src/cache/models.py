# src/cache/models.py — v2
"""Cache domain models: FileFingerprint, CacheEntry, CacheLookupResult."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from imgpress.cache.scope import ParameterScope
from imgpress.core.results import CompressionResult


class FileFingerprint(BaseModel):
    """Identity key for cache lookups: (name, byte size, modification time).

    This is not a content hash. A file replaced by different bytes with the
    same name, size and mtime collides with its predecessor and reuses the
    stale result; that risk is accepted rather than paid for with hashing.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    size: int
    mtime_ms: int

    @property
    def key(self) -> str:
        """Stable string form, usable as a file or hash-map key."""
        return f"{self.name}-{self.size}-{self.mtime_ms}"


class CacheEntry(BaseModel):
    """Parameter scope snapshot and the result it produced."""

    model_config = ConfigDict(frozen=True)

    fingerprint: FileFingerprint
    scope: ParameterScope
    result: CompressionResult
    cached_at: datetime


class CacheLookupResult(BaseModel):
    """Whether a file can reuse its cached result."""

    status: Literal["miss", "stale", "hit"] = "miss"
    entry: CacheEntry | None = None
    changed: list[str] = Field(default_factory=list)

    @property
    def needs_processing(self) -> bool:
        return self.status != "hit"
