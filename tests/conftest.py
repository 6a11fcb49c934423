# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides image factories, isolated settings/storage under tmp_path, and an
in-process PNG encoder double so unit tests never need the pngquant binary.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from PIL import Image

from imgpress.compression.png_encoder import BasePngEncoder, PngEncodeResult, PngquantOptions
from imgpress.config.settings import Settings
from imgpress.storage.layout import StorageLayout


class FakePngEncoder(BasePngEncoder):
    """Records calls; writes the first half of the input as its output."""

    def __init__(self, produce_output: bool = True, error: str | None = None) -> None:
        self.calls: list[tuple[Path, Path, PngquantOptions]] = []
        self.produce_output = produce_output
        self.error = error

    @property
    def name(self) -> str:
        return "fake-png"

    async def is_available(self) -> bool:
        return True

    async def compress(self, input_path, output_path, options):
        self.calls.append((Path(input_path), Path(output_path), options))
        if self.error:
            return PngEncodeResult(success=False, error=self.error)
        if not self.produce_output:
            return PngEncodeResult(success=False, error="Output file was not produced")
        data = Path(input_path).read_bytes()
        Path(output_path).write_bytes(data[: max(1, len(data) // 2)])
        return PngEncodeResult(
            success=True,
            input_size=len(data),
            output_size=Path(output_path).stat().st_size,
        )


# === FIXTURES: Images ===


@pytest.fixture
def make_image(tmp_path):
    """Factory: write an image file under tmp_path/src and return its path.

    noise=True fills the pixels with random bytes so the file does not
    compress well (useful for size-dependent behaviour).
    """
    src_dir = tmp_path / "src"
    src_dir.mkdir(exist_ok=True)

    def _make(
        name: str,
        size: tuple[int, int] = (64, 48),
        mode: str = "RGB",
        fmt: str | None = None,
        color=(200, 60, 30),
        noise: bool = False,
    ) -> Path:
        if noise:
            img = Image.frombytes(mode, size, os.urandom(size[0] * size[1] * len(mode)))
        else:
            if mode == "RGBA" and len(color) == 3:
                color = (*color, 128)
            img = Image.new(mode, size, color)
        path = src_dir / name
        img.save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def corrupt_image(tmp_path) -> Path:
    """A .png file that is not an image."""
    path = tmp_path / "broken.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nthis is not really a png")
    return path


# === FIXTURES: Configuration and storage ===


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from any .env, with storage under tmp_path."""
    return Settings(
        _env_file=None,
        uploads_dir=tmp_path / "data" / "uploads",
        compressed_dir=tmp_path / "data" / "compressed",
        resized_dir=tmp_path / "data" / "resized",
        cache_root=tmp_path / "cache",
    )


@pytest.fixture
def layout(settings) -> StorageLayout:
    layout = StorageLayout.from_settings(settings)
    layout.ensure_directories()
    return layout


@pytest.fixture
def fake_png_encoder() -> FakePngEncoder:
    return FakePngEncoder()


@pytest.fixture
def failing_png_encoder() -> FakePngEncoder:
    """Encoder that runs but never produces output."""
    return FakePngEncoder(produce_output=False)
