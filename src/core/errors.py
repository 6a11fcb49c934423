# src/core/errors.py — v1
"""Error taxonomy and message sanitization for per-file failures."""

from __future__ import annotations

import re

FILE_PLACEHOLDER = "[file]"
PATH_PLACEHOLDER = "[path]"

_IMAGE_EXT = r"\.(?:png|jpe?g|webp|bmp)"
_IMAGE_PATH_RE = re.compile(r"/[^\s\"']+" + _IMAGE_EXT + r"\b", re.IGNORECASE)
_IMAGE_SUFFIX_RE = re.compile(_IMAGE_EXT + r"$", re.IGNORECASE)
# Quoted paths may contain spaces. Single-quoted ones must be absolute.
_QUOTED_PATH_RE = re.compile(r"\"([^\"\n]*[/\\][^\"\n]*)\"|'((?:/|[A-Za-z]:\\)[^'\n]*)'")
_POSIX_PATH_RE = re.compile(r"(?<![\w.\]])/[^\s\"']+")
_WINDOWS_PATH_RE = re.compile(r"\b[A-Za-z]:\\[^\s\"']*")


class ImgpressError(Exception):
    """Base class for all imgpress errors."""


class ImageReadError(ImgpressError):
    """Input image is missing, unreadable, corrupt or of an unsupported format."""


class EncoderError(ImgpressError):
    """An encoder failed to produce output."""


class QuantizerNotFoundError(EncoderError):
    """The external PNG quantizer binary could not be located."""


def sanitize_error(message: str) -> str:
    """Replace filesystem paths in an error message with placeholder tokens.

    Image paths become ``[file]``, any other absolute path becomes ``[path]``.
    """
    cleaned = _QUOTED_PATH_RE.sub(_replace_quoted, message)
    cleaned = _IMAGE_PATH_RE.sub(FILE_PLACEHOLDER, cleaned)
    cleaned = _WINDOWS_PATH_RE.sub(PATH_PLACEHOLDER, cleaned)
    cleaned = _POSIX_PATH_RE.sub(PATH_PLACEHOLDER, cleaned)
    return cleaned


def _replace_quoted(match: re.Match) -> str:
    double, single = match.groups()
    quote, body = ('"', double) if double is not None else ("'", single)
    token = FILE_PLACEHOLDER if _IMAGE_SUFFIX_RE.search(body) else PATH_PLACEHOLDER
    return f"{quote}{token}{quote}"
