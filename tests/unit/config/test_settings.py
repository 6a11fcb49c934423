# tests/unit/config/test_settings.py — v2
"""Tests for config/settings.py — typed Settings and validation rules."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from imgpress.config.settings import ConfigurationError, Settings, load_settings


class TestSettingsDefaults:
    def test_default_limits(self):
        s = Settings(_env_file=None)
        assert s.max_file_size_mb == 100
        assert s.max_files == 100
        assert s.supported_formats_list == ["jpeg", "jpg", "png", "bmp", "webp"]

    def test_default_retention(self):
        s = Settings(_env_file=None)
        assert s.file_retention_seconds == 1800
        assert s.cleanup_interval_seconds == 300

    def test_default_storage_areas(self):
        s = Settings(_env_file=None)
        assert s.uploads_dir == Path("data/uploads")
        assert s.compressed_dir == Path("data/compressed")
        assert s.resized_dir == Path("data/resized")
        assert s.sweep_exempt_names_list == [".gitkeep"]

    def test_default_pipeline_sequential(self):
        s = Settings(_env_file=None)
        assert s.batch_max_concurrency == 1

    def test_default_timeout(self):
        s = Settings(_env_file=None)
        assert s.pngquant_timeout == 120.0

    def test_zero_timeout_means_none(self):
        s = Settings(_env_file=None, pngquant_timeout_seconds=0)
        assert s.pngquant_timeout is None


class TestSettingsValidation:
    def test_storage_areas_must_differ(self, tmp_path):
        with pytest.raises(ConfigurationError, match="COMPRESSED_DIR must differ from UPLOADS_DIR"):
            Settings(
                _env_file=None,
                uploads_dir=tmp_path / "a",
                compressed_dir=tmp_path / "a",
                resized_dir=tmp_path / "b",
            )

    def test_storage_areas_compared_after_resolve(self, tmp_path):
        with pytest.raises(ConfigurationError, match="RESIZED_DIR"):
            Settings(
                _env_file=None,
                uploads_dir=tmp_path / "u",
                compressed_dir=tmp_path / "c",
                resized_dir=tmp_path / "x" / ".." / "u",
            )

    @pytest.mark.parametrize("field", [
        "file_retention_seconds",
        "cleanup_interval_seconds",
        "batch_max_concurrency",
    ])
    def test_positive_fields(self, field):
        with pytest.raises(ValidationError, match=field):
            Settings(_env_file=None, **{field: 0})

    def test_negative_timeout_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, pngquant_timeout_seconds=-1)

    def test_invalid_cache_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, cache_backend="redis")


class TestEnvLoading:
    def test_env_variables(self, monkeypatch):
        monkeypatch.setenv("FILE_RETENTION_SECONDS", "60")
        monkeypatch.setenv("SUPPORTED_FORMATS", "png, jpeg")
        s = Settings(_env_file=None)
        assert s.file_retention_seconds == 60
        assert s.supported_formats_list == ["png", "jpeg"]

    def test_env_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("MAX_FILES=5\nUNKNOWN_KEY=ignored\n", encoding="utf-8")
        s = Settings(_env_file=env)
        assert s.max_files == 5


class TestLoadSettings:
    def test_overrides(self, tmp_path):
        s = load_settings(_env_file=None, cleanup_interval_seconds=10)
        assert s.cleanup_interval_seconds == 10
