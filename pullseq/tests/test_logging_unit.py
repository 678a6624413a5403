"""Structured logging helpers: log_event payloads, trace gating, formatter."""
from __future__ import annotations

import json
import logging

from pullseq.base.logging import LogContext, configure_logger, get_logger, log_event, trace_event
from pullseq.base.log_support import JsonFormatter
from pullseq.base.errors import ObjectDisposedError

from .utils import assert_true


def _json_lines(text: str):
    return [json.loads(line) for line in text.splitlines() if line.strip().startswith("{")]


def test_log_event_drops_none_and_merges_context(capsys):
    logger = get_logger("pullseq.test", json_mode=True)
    ctx = LogContext(operator="catch", surface="sync", enumerator_id="catch#1", extra={"attempt": 2, "skip": None})
    log_event(logger, "unit.event", ctx, answer=42, missing=None)
    records = _json_lines(capsys.readouterr().err)
    assert_true(len(records) == 1, f"expected one record, got {records!r}")
    record = records[0]
    assert_true(record["event"] == "unit.event", "event key hoisted")
    assert_true(record["operator"] == "catch" and record["attempt"] == 2, "context merged")
    assert_true("missing" not in record and "skip" not in record, "None values dropped")
    assert_true(record["logger"] == "pullseq.test", "child logger name kept")


def test_trace_event_is_silent_by_default(capsys):
    trace_event("unit.trace", LogContext(operator="retry"))
    assert_true(capsys.readouterr().err == "", "tracing disabled by default")


def test_trace_event_attaches_error_fields(tracing, capsys):
    trace_event("unit.trace", LogContext(operator="retry", surface="async"), error=ObjectDisposedError(), attempt=3)
    records = _json_lines(capsys.readouterr().err)
    assert_true(len(records) == 1, f"expected one record, got {records!r}")
    record = records[0]
    assert_true(record["event"] == "unit.trace", "event name")
    assert_true(record["error_code"] == "disposed", "normalized error code")
    assert_true(record["error_type"] == "ObjectDisposedError", "error type name")
    assert_true(record["attempt"] == 3 and record["logger"] == "pullseq.trace", "fields and logger")


def test_json_formatter_hoists_message_object():
    record = logging.LogRecord("pullseq", logging.INFO, __file__, 1, json.dumps({"event": "x", "n": 1}), None, None)
    data = json.loads(JsonFormatter().format(record))
    assert_true(data["event"] == "x" and data["n"] == 1, "payload keys hoisted")
    assert_true("msg" not in data and data["level"] == "INFO", "raw message removed")


def test_configure_logger_attaches_and_removes_file_handler(tmp_path):
    path = tmp_path / "logs" / "pullseq.log"
    logger = configure_logger(level="DEBUG", file_path=str(path))
    try:
        assert_true(logger.level == logging.DEBUG, "level applied")
        log_event(logger, "unit.file", n=1)
        for handler in logger.handlers:
            handler.flush()
        assert_true("unit.file" in path.read_text(encoding="utf-8"), "event written to file")
    finally:
        configure_logger(level="INFO", file_path=None)
    assert_true(
        not any(isinstance(h, logging.FileHandler) for h in logger.handlers),
        "managed file handler removed",
    )
