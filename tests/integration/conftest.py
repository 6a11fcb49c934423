# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests.

Integration tests exercise the real pngquant executable and the real
filesystem. Tests that need the quantizer are skipped when it is not
installed (see ``imgpress doctor``).
"""

from __future__ import annotations

import pytest
from PIL import Image

from imgpress.compression.pngquant import find_pngquant


def pytest_configure(config):
    config.addinivalue_line("markers", "pngquant: marks tests requiring the pngquant executable")


@pytest.fixture(scope="session")
def pngquant_binary() -> str:
    binary = find_pngquant()
    if binary is None:
        pytest.skip("pngquant not installed")
    return binary


@pytest.fixture
def gradient_png(tmp_path):
    """A 256x256 RGBA gradient: many colours, compresses well when quantized."""
    img = Image.new("RGBA", (256, 256))
    img.putdata([(x, y, (x + y) // 2, 255) for y in range(256) for x in range(256)])
    path = tmp_path / "gradient.png"
    img.save(path, format="PNG")
    return path
