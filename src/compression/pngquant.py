# src/compression/pngquant.py — v1
"""pngquant command-line adapter: the production PNG encoder.

The binary is run as a child process with an argument list (no shell).
Success requires the output file to exist afterwards; a missing output is
reported as a failed result, never raised.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from imgpress.compression.png_encoder import (
    BasePngEncoder,
    PngEncodeResult,
    PngquantOptions,
)
from imgpress.core.errors import QuantizerNotFoundError

logger = logging.getLogger(__name__)

# Checked in order after PATH lookup
CANDIDATE_PATHS: tuple[str, ...] = (
    "/usr/local/bin/pngquant",
    "/usr/bin/pngquant",
    "/opt/homebrew/bin/pngquant",
    r"C:\Program Files\pngquant\pngquant.exe",
    r"C:\Program Files (x86)\pngquant\pngquant.exe",
)

INSTALL_INSTRUCTIONS: dict[str, str] = {
    "macOS": "brew install pngquant",
    "ubuntu": "sudo apt-get install pngquant",
    "centos": "sudo yum install pngquant",
    "windows": "download pngquant-windows.zip and extract it onto PATH",
    "docker": "RUN apt-get update && apt-get install -y pngquant",
}

_STDERR_TAIL = 2000


def find_pngquant(explicit: str | None = None) -> str | None:
    """Locate the pngquant executable.

    Args:
        explicit: Configured path or command name; takes precedence.

    Returns:
        Path to the executable, or None if not found.
    """
    if explicit:
        return shutil.which(explicit) or (explicit if Path(explicit).is_file() else None)

    found = shutil.which("pngquant")
    if found:
        return found
    for candidate in CANDIDATE_PATHS:
        if Path(candidate).is_file():
            return candidate
    return None


def build_pngquant_args(
    binary: str, input_path: Path, output_path: Path, options: PngquantOptions
) -> list[str]:
    """Build the pngquant argument vector.

    Lossless mode pins --quality to 100 and adds --nofs instead of using the
    configured range.
    """
    args = [binary, f"--quality={options.quality_arg}", f"--speed={options.speed}"]
    if options.posterize > 0:
        args.append(f"--posterize={options.posterize}")
    if options.dithering_disabled:
        args.append("--nofs")
    if options.strip:
        args.append("--strip")
    if options.force:
        args.append("--force")
    if options.skip_if_larger:
        args.append("--skip-if-larger")
    args += ["--output", str(output_path), str(input_path)]
    return args


class PngquantEncoder(BasePngEncoder):
    """Run pngquant as a child process.

    Args:
        binary: Explicit executable; discovered on PATH when None.
        timeout_s: Kill the child after this many seconds. None waits forever.
    """

    def __init__(self, binary: str | None = None, timeout_s: float | None = None) -> None:
        self._binary = find_pngquant(binary)
        self._timeout_s = timeout_s

    @property
    def name(self) -> str:
        return "pngquant-cli"

    @property
    def binary(self) -> str | None:
        return self._binary

    async def is_available(self) -> bool:
        if not self._binary:
            return False
        try:
            proc = await asyncio.create_subprocess_exec(
                self._binary, "--version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=10)
        except (OSError, asyncio.TimeoutError) as exc:
            logger.warning("pngquant unavailable: %s", exc)
            return False
        if proc.returncode != 0:
            return False
        logger.info("pngquant available: %s", stdout.decode(errors="replace").strip())
        return True

    async def compress(
        self, input_path: Path, output_path: Path, options: PngquantOptions
    ) -> PngEncodeResult:
        if not self._binary:
            raise QuantizerNotFoundError("pngquant is not installed or could not be found")

        input_path = Path(input_path)
        output_path = Path(output_path)
        args = build_pngquant_args(self._binary, input_path, output_path, options)
        logger.debug("Running pngquant: %s", " ".join(args[1:]))

        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            return PngEncodeResult(success=False, command=args, error=f"Failed to start pngquant: {exc}")

        try:
            _, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=self._timeout_s)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            logger.error("pngquant timed out after %ss", self._timeout_s)
            return PngEncodeResult(
                success=False,
                command=args,
                error=f"pngquant timed out after {self._timeout_s}s",
            )

        stderr = stderr_bytes.decode(errors="replace")[-_STDERR_TAIL:]

        if proc.returncode != 0:
            detail = stderr.strip() or f"exit code {proc.returncode}"
            return PngEncodeResult(
                success=False,
                command=args,
                stderr=stderr,
                error=f"pngquant exited with code {proc.returncode}: {detail}",
            )

        if stderr.strip():
            logger.warning("pngquant stderr: %s", stderr.strip())

        if not output_path.exists():
            return PngEncodeResult(
                success=False,
                command=args,
                stderr=stderr,
                error="Output file was not produced; the quantizer may have skipped it as larger than the input",
            )

        return PngEncodeResult(
            success=True,
            input_size=input_path.stat().st_size,
            output_size=output_path.stat().st_size,
            command=args,
            stderr=stderr,
        )
