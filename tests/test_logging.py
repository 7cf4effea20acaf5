"""
Tests for utils/logging.py: stderr handler setup and JSON records.
"""
import json
import logging
import sys
from io import StringIO

import pytest

from utils.logging import JsonFormatter, TEXT_FORMAT, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(msg="hello %s", args=("world",), level=logging.INFO, **extra):
    record = logging.LogRecord("exporter.test", level, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_basic_fields(self):
        data = json.loads(JsonFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "exporter.test"
        assert data["message"] == "hello world"
        assert "timestamp" in data

    def test_extra_fields(self):
        data = json.loads(JsonFormatter().format(
            _record(sticker_id="deadbeef", url="https://x/a", attempt=2)))
        assert data["sticker_id"] == "deadbeef"
        assert data["url"] == "https://x/a"
        assert data["attempt"] == 2
        assert "archive" not in data

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (),
                                       sys.exc_info())
        data = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in data["exc_info"]


class TestSetupLogging:
    def test_text_format(self):
        stream = StringIO()
        handler = setup_logging("INFO", "text", stream)
        assert handler.formatter._fmt == TEXT_FORMAT
        logging.getLogger("exporter.test").info("sticker %s ok", "aa")
        assert "INFO exporter.test sticker aa ok" in stream.getvalue()

    def test_json_format(self):
        stream = StringIO()
        setup_logging("INFO", "json", stream)
        logging.getLogger("exporter.test").warning("careful", extra={"path": "/tmp/a"})
        data = json.loads(stream.getvalue().strip())
        assert data["message"] == "careful"
        assert data["path"] == "/tmp/a"

    def test_level_filters(self):
        stream = StringIO()
        setup_logging("WARNING", "text", stream)
        logging.getLogger("exporter.test").info("hidden")
        assert stream.getvalue() == ""

    def test_replaces_previous_handlers(self):
        setup_logging("INFO", "text", StringIO())
        handler = setup_logging("INFO", "text", StringIO())
        assert logging.getLogger().handlers == [handler]
