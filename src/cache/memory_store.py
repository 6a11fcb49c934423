# src/cache/memory_store.py — v1
"""In-process cache store (default CACHE_BACKEND=memory)."""

from __future__ import annotations

from imgpress.cache.base_cache_store import BaseCacheStore
from imgpress.cache.models import CacheEntry, FileFingerprint


class MemoryCacheStore(BaseCacheStore):
    """Dict-backed store living for the duration of one client session."""

    def __init__(self) -> None:
        self._entries: dict[FileFingerprint, CacheEntry] = {}

    async def get(self, fingerprint: FileFingerprint) -> CacheEntry | None:
        return self._entries.get(fingerprint)

    async def put(self, entry: CacheEntry) -> None:
        self._entries[entry.fingerprint] = entry

    async def delete(self, fingerprint: FileFingerprint) -> None:
        self._entries.pop(fingerprint, None)

    async def list_entries(self) -> list[CacheEntry]:
        return list(self._entries.values())

    async def clear(self) -> None:
        self._entries.clear()
