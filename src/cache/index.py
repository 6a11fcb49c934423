# src/cache/index.py — v1
"""CacheIndex: decide per file whether a previous result can be reused.

The index is mutated only by the run that produced a result. Concurrent runs
over the same file set are not coordinated here; callers serialize them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from imgpress.cache.base_cache_store import BaseCacheStore
from imgpress.cache.models import CacheEntry, CacheLookupResult, FileFingerprint
from imgpress.cache.scope import ParameterScope, changed_keys, is_stale
from imgpress.core.results import CompressionResult

logger = logging.getLogger(__name__)


class CacheIndex:
    """Map file fingerprints to {last scope, last result}."""

    def __init__(self, store: BaseCacheStore) -> None:
        self._store = store

    async def lookup(
        self, fingerprint: FileFingerprint, scope: ParameterScope
    ) -> CacheLookupResult:
        """Compare the current scope against the one the cached result used."""
        entry = await self._store.get(fingerprint)
        if entry is None:
            return CacheLookupResult(status="miss")

        if is_stale(scope, entry.scope):
            changed = changed_keys(scope, entry.scope)
            logger.debug(
                "Stale cache entry for %s (changed: %s)",
                fingerprint.name, ", ".join(changed),
            )
            return CacheLookupResult(status="stale", entry=entry, changed=changed)

        return CacheLookupResult(status="hit", entry=entry)

    async def needs_processing(
        self, fingerprint: FileFingerprint, scope: ParameterScope
    ) -> bool:
        return (await self.lookup(fingerprint, scope)).needs_processing

    async def record(
        self,
        fingerprint: FileFingerprint,
        scope: ParameterScope,
        result: CompressionResult,
    ) -> CacheEntry | None:
        """Store a fresh result under the scope that produced it.

        Failed results are not recorded, so failed files are retried next run.
        """
        if not result.success:
            await self._store.delete(fingerprint)
            return None

        entry = CacheEntry(
            fingerprint=fingerprint,
            scope=scope,
            result=result.model_copy(update={"from_cache": False}),
            cached_at=datetime.now(timezone.utc),
        )
        await self._store.put(entry)
        return entry

    async def forget(self, fingerprint: FileFingerprint) -> None:
        """Drop a file that left the working set."""
        await self._store.delete(fingerprint)

    async def forget_name(self, name: str) -> int:
        """Drop every entry recorded under a file name.

        Used when the file is gone and its fingerprint can no longer be read.
        """
        removed = 0
        for entry in await self._store.list_entries():
            if entry.fingerprint.name == name:
                await self._store.delete(entry.fingerprint)
                removed += 1
        return removed

    async def clear(self) -> None:
        await self._store.clear()

    async def entries(self) -> list[CacheEntry]:
        return await self._store.list_entries()
