# tests/unit/compression/test_unit_pngquant.py — v1
"""Tests for compression/pngquant.py and png_encoder.py.

Subprocess behaviour is exercised with a small stand-in script instead of
the real binary.
"""

from __future__ import annotations

import stat
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from imgpress.compression.png_encoder import PngquantOptions
from imgpress.compression.pngquant import PngquantEncoder, build_pngquant_args, find_pngquant
from imgpress.core.errors import QuantizerNotFoundError
from imgpress.core.models import CompressionOptions

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="shebang scripts need POSIX")


def _write_script(tmp_path: Path, body: str) -> str:
    script = tmp_path / "fake-pngquant"
    script.write_text(f"#!{sys.executable}\nimport sys, time\n{body}\n", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    return str(script)


# Writes half of the input to the --output path
COPY_BODY = """
args = sys.argv[1:]
if args == ["--version"]:
    print("2.18.0")
    sys.exit(0)
out = args[args.index("--output") + 1]
data = open(args[-1], "rb").read()
open(out, "wb").write(data[: len(data) // 2])
"""


class TestPngquantOptions:
    def test_from_options(self):
        o = PngquantOptions.from_options(CompressionOptions(pngquant_min=50, pngquant_max=70, pngquant_speed=8))
        assert (o.quality_min, o.quality_max, o.speed, o.lossy) == (50, 70, 8, True)

    def test_lossy_quality_range(self):
        assert PngquantOptions(quality_min=60, quality_max=80).quality_arg == "60-80"

    def test_lossless_pins_quality(self):
        o = PngquantOptions(quality_min=60, quality_max=80, lossy=False)
        assert o.quality_arg == "100"
        assert o.dithering_disabled is True

    def test_invalid_range(self):
        with pytest.raises(ValidationError):
            PngquantOptions(quality_min=90, quality_max=10)


class TestBuildArgs:
    def test_lossy_args(self):
        args = build_pngquant_args("pngquant", Path("in.png"), Path("out.png"), PngquantOptions())
        assert args == [
            "pngquant", "--quality=60-80", "--speed=3", "--strip", "--force",
            "--output", "out.png", "in.png",
        ]

    def test_lossless_args(self):
        args = build_pngquant_args("pngquant", Path("in.png"), Path("out.png"), PngquantOptions(lossy=False))
        assert "--quality=100" in args
        assert "--nofs" in args
        assert not any(a.startswith("--quality=60") for a in args)

    def test_lossy_keeps_dithering(self):
        args = build_pngquant_args("pngquant", Path("i"), Path("o"), PngquantOptions())
        assert "--nofs" not in args

    def test_optional_flags(self):
        opts = PngquantOptions(posterize=2, skip_if_larger=True, nofs=True)
        args = build_pngquant_args("pngquant", Path("i"), Path("o"), opts)
        assert "--posterize=2" in args
        assert "--skip-if-larger" in args
        assert "--nofs" in args

    def test_no_shell_quoting(self):
        args = build_pngquant_args("pngquant", Path("my file.png"), Path("out dir/o.png"), PngquantOptions())
        assert args[-1] == "my file.png"
        assert args[-2] == "out dir/o.png"


class TestFindPngquant:
    def test_explicit_file(self, tmp_path):
        script = _write_script(tmp_path, "sys.exit(0)")
        assert find_pngquant(script) == script

    def test_explicit_missing(self, tmp_path):
        assert find_pngquant(str(tmp_path / "nothing")) is None


class TestPngquantEncoder:
    @pytest.mark.asyncio
    async def test_missing_binary_raises(self, tmp_path):
        encoder = PngquantEncoder(binary=str(tmp_path / "nothing"))
        assert encoder.binary is None
        assert await encoder.is_available() is False
        with pytest.raises(QuantizerNotFoundError):
            await encoder.compress(tmp_path / "a.png", tmp_path / "b.png", PngquantOptions())

    @posix_only
    @pytest.mark.asyncio
    async def test_available(self, tmp_path):
        encoder = PngquantEncoder(binary=_write_script(tmp_path, COPY_BODY))
        assert encoder.name == "pngquant-cli"
        assert await encoder.is_available() is True

    @posix_only
    @pytest.mark.asyncio
    async def test_success(self, tmp_path, make_image):
        src = make_image("in.png", size=(50, 50))
        out = tmp_path / "out.png"
        encoder = PngquantEncoder(binary=_write_script(tmp_path, COPY_BODY))
        result = await encoder.compress(src, out, PngquantOptions())
        assert result.success is True
        assert result.output_size == out.stat().st_size
        assert result.input_size == src.stat().st_size
        assert "--quality=60-80" in result.command

    @posix_only
    @pytest.mark.asyncio
    async def test_nonzero_exit(self, tmp_path, make_image):
        body = 'sys.stderr.write("quality too low\\n"); sys.exit(99)'
        encoder = PngquantEncoder(binary=_write_script(tmp_path, body))
        result = await encoder.compress(make_image("in.png"), tmp_path / "out.png", PngquantOptions())
        assert result.success is False
        assert "99" in result.error
        assert "quality too low" in result.error

    @posix_only
    @pytest.mark.asyncio
    async def test_missing_output_is_failure_not_exception(self, tmp_path, make_image):
        encoder = PngquantEncoder(binary=_write_script(tmp_path, "sys.exit(0)"))
        result = await encoder.compress(make_image("in.png"), tmp_path / "out.png", PngquantOptions())
        assert result.success is False
        assert "not produced" in result.error

    @posix_only
    @pytest.mark.asyncio
    async def test_timeout_kills_child(self, tmp_path, make_image):
        encoder = PngquantEncoder(binary=_write_script(tmp_path, "time.sleep(30)"), timeout_s=0.5)
        result = await encoder.compress(make_image("in.png"), tmp_path / "out.png", PngquantOptions())
        assert result.success is False
        assert "timed out" in result.error
