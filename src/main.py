# src/main.py — v2
"""CLI entry point: compress, analyze, sweep, config, doctor commands.

Usage:
    imgpress compress <file>... [options]
    imgpress analyze <file>
    imgpress sweep
    imgpress config
    imgpress doctor
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from imgpress.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        from imgpress.config.settings import load_settings

        settings = load_settings()
    except Exception as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    _setup_logging(settings, args.verbose)

    try:
        return asyncio.run(args.func(args, settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="imgpress",
        description=f"imgpress v{__version__} — Adaptive batch image compressor",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- compress ---
    p_compress = subparsers.add_parser(
        "compress", help="Compress images, reusing cached results where possible",
    )
    p_compress.add_argument("files", type=Path, nargs="+", help="Images to compress")
    p_compress.add_argument(
        "--lossless", action="store_true",
        help="Lossless PNG quantization (default: lossy)",
    )
    p_compress.add_argument("--pngquant-min", type=int, default=60, help="PNG minimum quality (default: 60)")
    p_compress.add_argument("--pngquant-max", type=int, default=80, help="PNG maximum quality (default: 80)")
    p_compress.add_argument("--pngquant-speed", type=int, default=3, help="PNG speed 1-11 (default: 3)")
    p_compress.add_argument("--jpeg-quality", type=int, default=80, help="JPEG quality (default: 80)")
    p_compress.add_argument("--webp-quality", type=int, default=80, help="WebP quality (default: 80)")
    p_compress.add_argument(
        "--resize-mode", choices=["keep", "custom", "maxWidth", "maxHeight"], default="keep",
        help="Resize mode (default: keep)",
    )
    p_compress.add_argument("--width", type=int, default=300, help="Resize width (default: 300)")
    p_compress.add_argument("--height", type=int, default=200, help="Resize height (default: 200)")
    p_compress.add_argument(
        "--skip-if-smaller", action="store_true",
        help="Leave images already within the target size untouched",
    )
    p_compress.add_argument(
        "--fit", choices=["cover", "contain", "fill"], default="cover",
        help="Fit strategy for custom resize (default: cover)",
    )
    p_compress.add_argument(
        "--to-jpeg", action="append", default=[], metavar="NAME",
        help="Convert this PNG (by file name) to JPEG; repeatable",
    )
    p_compress.set_defaults(func=_cmd_compress)

    # --- analyze ---
    p_analyze = subparsers.add_parser(
        "analyze", help="Classify an image and show the recommended config",
    )
    p_analyze.add_argument("file", type=Path, help="Path to image")
    p_analyze.set_defaults(func=_cmd_analyze)

    # --- sweep ---
    p_sweep = subparsers.add_parser(
        "sweep", help="Delete stored artifacts older than the retention window",
    )
    p_sweep.set_defaults(func=_cmd_sweep)

    # --- config ---
    p_config = subparsers.add_parser(
        "config", help="Show limits, retention policy and profile table",
    )
    p_config.set_defaults(func=_cmd_config)

    # --- doctor ---
    p_doctor = subparsers.add_parser(
        "doctor", help="Check that pngquant is installed",
    )
    p_doctor.set_defaults(func=_cmd_doctor)

    return parser


async def _cmd_compress(args: argparse.Namespace, settings) -> int:
    """Run one client session over the given files."""
    from pydantic import ValidationError

    from imgpress.batch.session import CompressionSession
    from imgpress.cache.cache_factory import create_cache_store
    from imgpress.cache.index import CacheIndex
    from imgpress.core.models import CompressionOptions
    from imgpress.pipeline.batch_pipeline import BatchPipeline

    try:
        options = CompressionOptions(
            lossy=not args.lossless,
            pngquant_min=args.pngquant_min,
            pngquant_max=args.pngquant_max,
            pngquant_speed=args.pngquant_speed,
            jpeg_quality=args.jpeg_quality,
            webp_quality=args.webp_quality,
            resize_mode=args.resize_mode,
            resize_width=args.width,
            resize_height=args.height,
            skip_if_smaller=args.skip_if_smaller,
            fit=args.fit,
        )
    except ValidationError as exc:
        logger.error("Invalid compression options: %s", exc)
        return 2

    pipeline = BatchPipeline(settings)
    session = CompressionSession(
        CacheIndex(create_cache_store(settings)),
        submit=pipeline.process,
        layout=pipeline.layout,
    )
    run = await session.run(list(args.files), options, convert_to_jpeg=args.to_jpeg)

    _print_json([r.model_dump(mode="json") for r in run.results])
    print(run.message, file=sys.stderr)
    return 0 if run.error_count == 0 else 1


async def _cmd_analyze(args: argparse.Namespace, settings) -> int:
    """Print the analysis report for one image."""
    from imgpress.api.facade import analyze_image
    from imgpress.core.errors import ImageReadError

    try:
        report = await analyze_image(args.file)
    except ImageReadError as exc:
        logger.error("Cannot analyze %s: %s", args.file.name, exc)
        return 1
    _print_json(report.model_dump(mode="json"))
    return 0


async def _cmd_sweep(args: argparse.Namespace, settings) -> int:
    """Run one retention sweep."""
    from imgpress.api.facade import trigger_sweep

    summary = await trigger_sweep(settings)
    _print_json(summary.model_dump(mode="json"))
    return 0


async def _cmd_config(args: argparse.Namespace, settings) -> int:
    """Print the service configuration report."""
    from imgpress.api.facade import get_service_config

    _print_json(get_service_config(settings).model_dump(mode="json"))
    return 0


async def _cmd_doctor(args: argparse.Namespace, settings) -> int:
    """Report pngquant availability and how to install it."""
    from imgpress.compression.pngquant import INSTALL_INSTRUCTIONS, PngquantEncoder

    encoder = PngquantEncoder(binary=settings.pngquant_path or None)
    if await encoder.is_available():
        print(f"pngquant: OK ({encoder.binary})")
        return 0

    print("pngquant: NOT FOUND")
    print("PNG compression requires pngquant. Install it with:")
    for platform, command in INSTALL_INSTRUCTIONS.items():
        print(f"  {platform:<8} {command}")
    return 1


def _print_json(payload: object) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _setup_logging(settings, verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from imgpress.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
