# src/compression/encoders.py — v1
"""In-process JPEG and WebP encoders (Pillow).

These functions block; CompressionStage runs them in a worker thread.
"""

from __future__ import annotations

from pathlib import Path

from PIL import Image

from imgpress.compression.profiles import JpegConfig, WebpConfig

WHITE = (255, 255, 255)


def flatten_to_rgb(img: Image.Image, background: tuple[int, int, int] = WHITE) -> Image.Image:
    """Drop transparency by compositing onto an opaque background."""
    if img.mode == "P":
        img = img.convert("RGBA")
    if img.mode in ("RGBA", "LA"):
        bg = Image.new("RGB", img.size, background)
        bg.paste(img, mask=img.getchannel("A"))
        return bg
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


def encode_jpeg(input_path: Path, output_path: Path, config: JpegConfig) -> int:
    """Encode to JPEG and return the output size in bytes."""
    with Image.open(input_path) as img:
        img.load()
        rgb = flatten_to_rgb(img)
        rgb.save(
            output_path,
            format="JPEG",
            quality=config.quality,
            progressive=config.progressive,
            optimize=config.mozjpeg or config.optimize_scans,
        )
    return Path(output_path).stat().st_size


def encode_webp(input_path: Path, output_path: Path, config: WebpConfig) -> int:
    """Encode to WebP and return the output size in bytes."""
    with Image.open(input_path) as img:
        img.load()
        frame = img
        if frame.mode == "P":
            frame = frame.convert("RGBA")
        elif frame.mode not in ("RGB", "RGBA"):
            frame = frame.convert("RGBA" if "A" in frame.getbands() else "RGB")
        frame.save(
            output_path,
            format="WEBP",
            quality=config.quality,
            method=config.effort,
            lossless=config.lossless,
        )
    return Path(output_path).stat().st_size
