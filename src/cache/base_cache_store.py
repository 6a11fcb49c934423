# src/cache/base_cache_store.py — v2
"""Abstract cache store interface for per-file compression results."""

from __future__ import annotations

from abc import ABC, abstractmethod

from imgpress.cache.models import CacheEntry, FileFingerprint


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends, keyed by fingerprint."""

    @abstractmethod
    async def get(self, fingerprint: FileFingerprint) -> CacheEntry | None:
        """Retrieve the entry for a fingerprint."""

    @abstractmethod
    async def put(self, entry: CacheEntry) -> None:
        """Store an entry, overwriting any previous one for the fingerprint."""

    @abstractmethod
    async def delete(self, fingerprint: FileFingerprint) -> None:
        """Remove an entry. Missing entries are ignored."""

    @abstractmethod
    async def list_entries(self) -> list[CacheEntry]:
        """List all cached entries."""

    @abstractmethod
    async def clear(self) -> None:
        """Drop every entry."""
