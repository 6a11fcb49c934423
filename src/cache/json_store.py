# src/cache/json_store.py — v2
"""JSON file-based cache store (CACHE_BACKEND=json).

Stores one JSON file per fingerprint under CACHE_ROOT so results survive
between client runs.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from imgpress.cache.base_cache_store import BaseCacheStore
from imgpress.cache.models import CacheEntry, FileFingerprint

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    def __init__(self, cache_root: str | Path) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def get(self, fingerprint: FileFingerprint) -> CacheEntry | None:
        """Retrieve cache entry by fingerprint."""
        path = self._entry_path(fingerprint)
        if not path.exists():
            return None
        entry = self._read(path)
        if entry is not None and entry.fingerprint != fingerprint:
            # Two fingerprints mapped to the same sanitized file name
            return None
        return entry

    async def put(self, entry: CacheEntry) -> None:
        """Store a cache entry."""
        path = self._entry_path(entry.fingerprint)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(entry.model_dump_json(indent=2), encoding="utf-8")

    async def delete(self, fingerprint: FileFingerprint) -> None:
        """Remove a cache entry."""
        self._entry_path(fingerprint).unlink(missing_ok=True)

    async def list_entries(self) -> list[CacheEntry]:
        """List all readable cached entries."""
        entries: list[CacheEntry] = []
        if not self._root.is_dir():
            return entries

        for path in sorted(self._root.glob("*.json")):
            entry = self._read(path)
            if entry is not None:
                entries.append(entry)

        return entries

    async def clear(self) -> None:
        for path in self._root.glob("*.json"):
            path.unlink(missing_ok=True)

    def _read(self, path: Path) -> CacheEntry | None:
        try:
            return CacheEntry.model_validate_json(path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning("Failed to read cache entry %s: %s", path.name, e)
            return None

    def _entry_path(self, fingerprint: FileFingerprint) -> Path:
        """Return file path for a fingerprint."""
        safe_key = fingerprint.key.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
