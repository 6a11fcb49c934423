# tests/unit/storage/test_unit_sweeper.py — v1
"""Tests for storage/sweeper.py — retention policy, idempotence, scheduling."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from imgpress.storage.sweeper import RetentionSweeper

NOW = 1_700_000_000.0


def _touch(path: Path, age_minutes: float) -> Path:
    path.write_bytes(b"x")
    mtime = NOW - age_minutes * 60
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture
def sweeper(layout) -> RetentionSweeper:
    return RetentionSweeper(
        layout,
        retention_seconds=30 * 60,
        interval_seconds=300,
        exempt_names=[".gitkeep"],
        clock=lambda: NOW,
    )


class TestSweep:
    @pytest.mark.asyncio
    async def test_deletes_only_expired(self, sweeper, layout):
        old = _touch(layout.uploads_dir / "old.png", 31)
        young = _touch(layout.uploads_dir / "young.png", 10)

        report = await sweeper.sweep()

        assert report.deleted_count == 1
        assert not old.exists()
        assert young.exists()
        (deleted,) = report.deleted_files
        assert (deleted.area, deleted.filename, deleted.age_minutes) == ("upload", "old.png", 31)

    @pytest.mark.asyncio
    async def test_all_three_areas(self, sweeper, layout):
        _touch(layout.uploads_dir / "u.png", 45)
        _touch(layout.compressed_dir / "compressed-c.png", 45)
        _touch(layout.resized_dir / "resized-r.png", 45)
        report = await sweeper.sweep()
        assert sorted(d.area for d in report.deleted_files) == ["compressed", "resized", "upload"]

    @pytest.mark.asyncio
    async def test_exactly_at_window_survives(self, sweeper, layout):
        kept = _touch(layout.compressed_dir / "edge.jpg", 30)
        report = await sweeper.sweep()
        assert report.deleted_count == 0
        assert kept.exists()

    @pytest.mark.asyncio
    async def test_marker_exempt(self, sweeper, layout):
        marker = _touch(layout.resized_dir / ".gitkeep", 10_000)
        await sweeper.sweep()
        assert marker.exists()

    @pytest.mark.asyncio
    async def test_second_sweep_is_noop(self, sweeper, layout):
        _touch(layout.uploads_dir / "a.png", 60)
        _touch(layout.compressed_dir / "b.png", 60)
        first = await sweeper.sweep()
        second = await sweeper.sweep()
        assert first.deleted_count == 2
        assert second.deleted_count == 0
        assert second.deleted_files == []

    @pytest.mark.asyncio
    async def test_concurrent_sweeps_delete_once(self, sweeper, layout):
        for i in range(5):
            _touch(layout.uploads_dir / f"f{i}.png", 60)
        a, b = await asyncio.gather(sweeper.sweep(), sweeper.sweep())
        assert a.deleted_count + b.deleted_count == 5
        assert list(layout.uploads_dir.iterdir()) == []

    @pytest.mark.asyncio
    async def test_expired_directory_removed(self, sweeper, layout):
        d = layout.uploads_dir / "batch"
        d.mkdir()
        (d / "inner.png").write_bytes(b"x")
        os.utime(d, (NOW - 3600, NOW - 3600))
        report = await sweeper.sweep()
        assert report.deleted_count == 1
        assert not d.exists()

    @pytest.mark.asyncio
    async def test_missing_area_is_skipped(self, layout):
        layout.resized_dir.rmdir()
        sweeper = RetentionSweeper(layout, 60, 60, clock=lambda: NOW)
        report = await sweeper.sweep()
        assert report.failed == []

    @pytest.mark.asyncio
    async def test_delete_failure_continues(self, sweeper, layout):
        bad = _touch(layout.uploads_dir / "a.png", 60)
        good = _touch(layout.uploads_dir / "b.png", 60)
        original_unlink = Path.unlink

        def flaky_unlink(self, *args, **kwargs):
            if self.name == "a.png":
                raise PermissionError("denied")
            return original_unlink(self, *args, **kwargs)

        with patch.object(Path, "unlink", flaky_unlink):
            report = await sweeper.sweep()

        assert bad.exists()
        assert not good.exists()
        assert report.deleted_count == 1
        assert report.failed == ["upload/a.png"]

    def test_message(self, sweeper, layout):
        _touch(layout.uploads_dir / "a.png", 60)
        assert sweeper.sweep_sync().message == "Cleanup finished, 1 expired files deleted"


class TestScheduling:
    @pytest.mark.asyncio
    async def test_start_and_stop(self, layout):
        _touch(layout.uploads_dir / "a.png", 60)
        sweeper = RetentionSweeper(layout, 60, 3600, clock=lambda: NOW)
        sweeper.start()
        assert sweeper.running
        for _ in range(50):
            if not (layout.uploads_dir / "a.png").exists():
                break
            await asyncio.sleep(0.02)
        await sweeper.stop()
        assert not sweeper.running
        assert not (layout.uploads_dir / "a.png").exists()

    @pytest.mark.asyncio
    async def test_run_forever_stops_on_event(self, layout):
        sweeper = RetentionSweeper(layout, 60, 0.01, clock=lambda: NOW)
        stop = asyncio.Event()
        task = asyncio.create_task(sweeper.run_forever(stop))
        await asyncio.sleep(0.05)
        stop.set()
        await asyncio.wait_for(task, timeout=1)

    @pytest.mark.asyncio
    async def test_stop_without_start(self, layout):
        await RetentionSweeper(layout, 60, 60).stop()
