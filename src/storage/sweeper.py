# src/storage/sweeper.py — v1
"""RetentionSweeper: delete storage artifacts older than the retention window.

A file is deleted when ``now - mtime > retention``; exempt marker names are
never touched. Entries that vanish mid-sweep are skipped silently, other
per-entry errors are logged and the sweep carries on.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import time
from pathlib import Path
from typing import Callable, Iterable

from imgpress.storage.layout import StorageLayout
from imgpress.storage.models import DeletedArtifact, StorageArea, SweepReport

logger = logging.getLogger(__name__)


class RetentionSweeper:
    """Age-based cleanup over the three storage areas.

    Args:
        layout: Storage areas to sweep.
        retention_seconds: Maximum artifact age.
        interval_seconds: Delay between periodic sweeps.
        exempt_names: File names never deleted.
        clock: Returns the current epoch time in seconds.
    """

    def __init__(
        self,
        layout: StorageLayout,
        retention_seconds: float,
        interval_seconds: float,
        exempt_names: Iterable[str] = (".gitkeep",),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._layout = layout
        self._retention = retention_seconds
        self._interval = interval_seconds
        self._exempt = frozenset(exempt_names)
        self._clock = clock
        self._task: asyncio.Task | None = None
        self._stop: asyncio.Event | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep_sync(self) -> SweepReport:
        """Run one sweep in the calling thread."""
        now = self._clock()
        report = SweepReport()
        for area, directory in self._layout.areas():
            self._sweep_area(area, directory, now, report)
        report.deleted_count = len(report.deleted_files)
        if report.deleted_count or report.failed:
            logger.info(
                "Sweep removed %d expired files (%d failures)",
                report.deleted_count, len(report.failed),
            )
        return report

    async def sweep(self) -> SweepReport:
        return await asyncio.to_thread(self.sweep_sync)

    def _sweep_area(
        self, area: StorageArea, directory: Path, now: float, report: SweepReport
    ) -> None:
        try:
            entries = list(directory.iterdir())
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.error("Cannot list %s area: %s", area, exc)
            report.failed.append(f"{area}: {exc}")
            return

        for entry in entries:
            if entry.name in self._exempt:
                continue
            try:
                age = now - entry.stat().st_mtime
                if age <= self._retention:
                    continue
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                logger.error("Failed to delete %s/%s: %s", area, entry.name, exc)
                report.failed.append(f"{area}/{entry.name}")
                continue

            age_minutes = round(age / 60)
            logger.debug("Deleted expired %s file %s (%d min old)", area, entry.name, age_minutes)
            report.deleted_files.append(
                DeletedArtifact(area=area, filename=entry.name, age_minutes=age_minutes)
            )

    # --- Periodic execution ---

    async def run_forever(self, stop_event: asyncio.Event) -> None:
        """Sweep every interval until stop_event is set."""
        logger.info(
            "Retention sweeper started (retention=%ss, interval=%ss)",
            self._retention, self._interval,
        )
        while not stop_event.is_set():
            try:
                await self.sweep()
            except Exception as exc:
                logger.error("Sweep failed: %s", exc)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
            except asyncio.TimeoutError:
                pass
        logger.info("Retention sweeper stopped")

    def start(self) -> asyncio.Task:
        """Schedule run_forever on the running loop."""
        if self.running:
            return self._task  # type: ignore[return-value]
        self._stop = asyncio.Event()
        self._task = asyncio.create_task(self.run_forever(self._stop))
        return self._task

    async def stop(self) -> None:
        if self._task is None or self._stop is None:
            return
        self._stop.set()
        await self._task
        self._task = None
        self._stop = None
