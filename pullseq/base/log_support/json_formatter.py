"""One-line JSON rendering for pullseq log records.

``log_event`` already emits a JSON object as the message; :class:`JsonFormatter`
lifts that object's keys into the output line instead of nesting it as an
escaped string. Attributes passed through ``extra=`` are appended unless they
clash with a key already written.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

ISO = "%Y-%m-%dT%H:%M:%S.%fZ"

# Attributes every LogRecord carries; never copied into the output.
_RECORD_INTERNALS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime", "taskName"}


def _as_object(text: str) -> Dict[str, Any] | None:
    try:
        parsed = json.loads(text)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


class JsonFormatter(logging.Formatter):
    """Render a record as ``{"ts", "level", "logger", ...}`` on one line."""

    def format(self, record: logging.LogRecord) -> str:
        line: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).strftime(ISO),
            "level": record.levelname,
            "logger": record.name,
        }
        text = record.getMessage()
        hoisted = _as_object(text)
        if hoisted is None:
            line["msg"] = text
        else:
            line.update(hoisted)
        for key, value in vars(record).items():
            if key.startswith("_") or key in _RECORD_INTERNALS:
                continue
            line.setdefault(key, value)
        if record.exc_info:
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=repr)


__all__ = ["JsonFormatter", "ISO"]
