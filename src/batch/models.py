# src/batch/models.py — v2
"""Client-side batch models: SessionRun, CompressionStatus."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from imgpress.core.results import CompressionResult


class CompressionStatus(BaseModel):
    """Display status of one file's result."""

    status: Literal["pending", "compressed", "increased", "no-change"]
    percentage: int = 0


class SessionRun(BaseModel):
    """Merged outcome of one client run: fresh, cached and invalid files."""

    results: list[CompressionResult] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    request_id: str | None = None

    @property
    def compressed_count(self) -> int:
        return sum(1 for r in self.results if r.success and not r.from_cache)

    @property
    def cached_count(self) -> int:
        return sum(1 for r in self.results if r.from_cache)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def message(self) -> str:
        """One-line summary for the user."""
        compressed, cached, errors = self.compressed_count, self.cached_count, self.error_count
        if errors:
            return f"Done: {compressed} compressed, {cached} cached, {errors} failed"
        if cached and compressed:
            return f"Compressed {compressed} images ({cached} from cache)"
        if cached:
            return f"All {cached} images reused cached results"
        return f"Compressed {compressed} images"
