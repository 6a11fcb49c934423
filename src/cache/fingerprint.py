# src/cache/fingerprint.py — v3
"""File fingerprinting for cache lookups.

Fingerprints are cheap metadata tuples (name, size, mtime) rather than content
hashes; see FileFingerprint for the collision caveat.
"""

from __future__ import annotations

from pathlib import Path

from imgpress.cache.models import FileFingerprint


def compute_fingerprint(path: Path, name: str | None = None) -> FileFingerprint:
    """Fingerprint a local file from its stat data.

    Args:
        path: File to fingerprint.
        name: Display name to key on (defaults to the file's own name).

    Raises:
        OSError: If the file cannot be stat'ed.
    """
    stat = Path(path).stat()
    return FileFingerprint(
        name=name or Path(path).name,
        size=stat.st_size,
        mtime_ms=stat.st_mtime_ns // 1_000_000,
    )


def parse_fingerprint_key(key: str) -> FileFingerprint:
    """Inverse of FileFingerprint.key.

    Names may contain dashes, so size and mtime are split from the right.
    """
    try:
        name, size, mtime = key.rsplit("-", 2)
        return FileFingerprint(name=name, size=int(size), mtime_ms=int(mtime))
    except ValueError as exc:
        raise ValueError(f"Malformed fingerprint key: {key!r}") from exc
