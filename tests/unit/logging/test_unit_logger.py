# tests/unit/logging/test_unit_logger.py — v2
"""Tests for logging/logger.py — logger factory and formatters."""

from __future__ import annotations

import json
import logging

from imgpress.logging.context import clear_context, set_file_context, set_request_context
from imgpress.logging.logger import JsonFormatter, TextFormatter, setup_logging


def _record(msg: str = "Hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test", level=logging.INFO, pathname="", lineno=0,
        msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["message"] == "Hello"
        assert "timestamp" in parsed
        assert "context" not in parsed

    def test_format_with_context(self):
        set_request_context("req42")
        set_file_context("a.png", stage="compress")
        parsed = json.loads(JsonFormatter().format(_record()))
        assert parsed["context"] == {"request_id": "req42", "filename": "a.png", "stage": "compress"}

    def test_extra_data(self):
        parsed = json.loads(JsonFormatter().format(_record(data={"ratio": 42.5})))
        assert parsed["data"] == {"ratio": 42.5}


class TestTextFormatter:
    def teardown_method(self):
        clear_context()

    def test_format_basic(self):
        output = TextFormatter().format(_record("Hello text"))
        assert "Hello text" in output
        assert "INFO" in output

    def test_includes_stage_and_file(self):
        set_file_context("b.jpg", stage="resize")
        output = TextFormatter().format(_record())
        assert "[resize]" in output
        assert "(b.jpg)" in output


class TestSetupLogging:
    def test_setup_json(self):
        setup_logging(level="DEBUG", log_format="json")
        root = logging.getLogger("imgpress")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_setup_text_no_duplicate_handlers(self):
        setup_logging(level="INFO", log_format="text")
        setup_logging(level="INFO", log_format="text")
        root = logging.getLogger("imgpress")
        assert root.level == logging.INFO
        assert len(root.handlers) == 1

    def test_setup_with_file(self, tmp_path):
        setup_logging(log_file=str(tmp_path / "logs" / "imgpress.log"))
        root = logging.getLogger("imgpress")
        assert len(root.handlers) == 2
        root.handlers.clear()
