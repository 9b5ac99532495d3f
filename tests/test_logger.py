"""Unit tests for structured logging."""
import json
import logging
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from logger import JSONFormatter, setup_logging


def make_record(msg="Ingested faq.txt", **extra):
    record = logging.LogRecord("services.qa_service", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_fields():
    payload = json.loads(JSONFormatter().format(make_record()))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "services.qa_service"
    assert payload["message"] == "Ingested faq.txt"
    assert payload["timestamp"].endswith("Z")


def test_json_formatter_includes_extra_fields():
    payload = json.loads(JSONFormatter().format(make_record(error_code="RATE_LIMIT_ERROR")))

    assert payload["error_code"] == "RATE_LIMIT_ERROR"
    assert "pathname" not in payload


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad stream")
    except ValueError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

    payload = json.loads(JSONFormatter().format(record))

    assert "ValueError: bad stream" in payload["exception"]


def test_setup_logging_installs_single_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("DEBUG")
        setup_logging("DEBUG")

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.level == logging.DEBUG
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
