# src/batch/session.py — v1
"""CompressionSession: client-side run with settings-scoped result reuse.

Per run:
  1. Drop unreadable files from the working set (failure entry, cache forgotten)
  2. Derive each file's ParameterScope and consult the CacheIndex
  3. Stage and submit only new or stale files as one batch
  4. Merge fresh and cached results back into submission order
  5. Record fresh results under the scope that produced them
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Iterable

from imgpress.batch.models import CompressionStatus, SessionRun
from imgpress.cache.fingerprint import compute_fingerprint
from imgpress.cache.index import CacheIndex
from imgpress.cache.models import FileFingerprint
from imgpress.cache.scope import ParameterScope, build_scope
from imgpress.core.errors import ImgpressError
from imgpress.core.models import CompressionOptions, format_from_filename
from imgpress.core.results import CompressionResult
from imgpress.pipeline.models import BatchRequest, BatchResponse, UploadedImage
from imgpress.storage.layout import StorageLayout

logger = logging.getLogger(__name__)

UNREADABLE_ERROR = "File is missing or corrupted"

SubmitFn = Callable[[BatchRequest], Awaitable[BatchResponse]]


def _probe(path: Path) -> FileFingerprint:
    """Fingerprint a file after checking its first byte can be read."""
    with open(path, "rb") as fh:
        fh.read(1)
    return compute_fingerprint(path)


class CompressionSession:
    """Repeated compression runs over a working set of local files.

    Args:
        cache_index: Result cache shared across runs.
        submit: Sends a batch to the pipeline (e.g. BatchPipeline.process).
        layout: Storage layout used to stage uploads.
    """

    def __init__(self, cache_index: CacheIndex, submit: SubmitFn, layout: StorageLayout) -> None:
        self._cache = cache_index
        self._submit = submit
        self._layout = layout
        self._known: dict[Path, FileFingerprint] = {}

    async def run(
        self,
        files: list[Path],
        options: CompressionOptions,
        convert_to_jpeg: Iterable[str] = (),
    ) -> SessionRun:
        convert = set(convert_to_jpeg)
        results: list[CompressionResult | None] = [None] * len(files)
        removed: list[str] = []
        pending: list[tuple[int, Path, FileFingerprint, ParameterScope]] = []

        for index, path in enumerate(files):
            path = Path(path)
            try:
                fingerprint = await asyncio.to_thread(_probe, path)
            except OSError as exc:
                logger.warning("Dropping unreadable file %s: %s", path.name, exc)
                results[index] = CompressionResult.failure(path.name, UNREADABLE_ERROR)
                removed.append(path.name)
                await self.forget(path)
                continue

            self._known[path] = fingerprint
            scope = build_scope(format_from_filename(path.name), options, path.name in convert)
            lookup = await self._cache.lookup(fingerprint, scope)
            if lookup.needs_processing:
                logger.debug("%s needs compression (%s)", path.name, lookup.status)
                pending.append((index, path, fingerprint, scope))
            else:
                logger.debug("%s reuses cached result", path.name)
                results[index] = lookup.entry.result.model_copy(update={"from_cache": True})

        request_id: str | None = None
        if pending:
            response = await self._submit_pending(pending, options, convert)
            request_id = response.request_id
            for (index, _, fingerprint, scope), result in zip(pending, response.results):
                results[index] = result
                await self._cache.record(fingerprint, scope, result)

        run = SessionRun(results=[r for r in results if r is not None], removed=removed, request_id=request_id)
        logger.info(run.message)
        return run

    async def _submit_pending(
        self,
        pending: list[tuple[int, Path, FileFingerprint, ParameterScope]],
        options: CompressionOptions,
        convert: set[str],
    ) -> BatchResponse:
        uploads: list[UploadedImage] = []
        for _, path, _, _ in pending:
            stored = await asyncio.to_thread(self._layout.stage_upload, path, path.name)
            uploads.append(UploadedImage(original_name=path.name, stored_path=stored))

        request = BatchRequest(
            files=uploads,
            options=options,
            convert_to_jpeg=[u.original_name for u in uploads if u.original_name in convert],
        )
        response = await self._submit(request)
        if len(response.results) != len(pending):
            raise ImgpressError(
                f"Batch returned {len(response.results)} results for {len(pending)} files"
            )
        return response

    async def forget(self, path: Path) -> None:
        """Remove a file from the working set and its cached result.

        Falls back to the file name when the file can no longer be read.
        """
        path = Path(path)
        fingerprint = self._known.pop(path, None)
        if fingerprint is None:
            try:
                fingerprint = compute_fingerprint(path)
            except OSError:
                removed = await self._cache.forget_name(path.name)
                logger.debug("Forgot %d cached entries for %s", removed, path.name)
                return
        await self._cache.forget(fingerprint)


def compression_status(result: CompressionResult | None) -> CompressionStatus:
    """Classify a result for display: smaller, larger, unchanged or pending."""
    if result is None or not result.success or result.original is None or result.compressed is None:
        return CompressionStatus(status="pending")
    if result.original.size <= 0:
        return CompressionStatus(status="no-change")

    percentage = round((result.original.size - result.compressed.size) / result.original.size * 100)
    if percentage > 0:
        return CompressionStatus(status="compressed", percentage=percentage)
    if percentage < 0:
        return CompressionStatus(status="increased", percentage=abs(percentage))
    return CompressionStatus(status="no-change")


def select_downloadable(
    results: Iterable[CompressionResult], include_negative: bool = False
) -> list[CompressionResult]:
    """Results worth offering in a bulk download.

    Results whose compressed output grew are left out unless include_negative.
    """
    selected = []
    for result in results:
        if not result.success or result.download_url is None:
            continue
        if not include_negative and (result.ratio or 0.0) < 0:
            continue
        selected.append(result)
    return selected
