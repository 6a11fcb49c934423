# src/logging/context.py — v2
"""Contextual logging support — attach request_id, filename, stage to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging; asyncio tasks copy them on creation,
# so concurrently processed files each keep their own values.
_request_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)
_filename: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "filename", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    request_id: str | None = None
    filename: str | None = None
    stage: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        request_id=_request_id.get(),
        filename=_filename.get(),
        stage=_stage.get(),
    )


def set_request_context(request_id: str) -> None:
    """Set batch-level context (called once per batch request)."""
    _request_id.set(request_id)


def set_file_context(filename: str, stage: str | None = None) -> None:
    """Set file-level context (called per file and per stage)."""
    _filename.set(filename)
    _stage.set(stage)


def set_stage(stage: str | None) -> None:
    """Update only the current stage."""
    _stage.set(stage)


def clear_context() -> None:
    """Reset all context variables."""
    _request_id.set(None)
    _filename.set(None)
    _stage.set(None)
