"""Base structured logging utilities for pullseq.

Rationale:
- Central place to configure consistent JSON (or plain) logging.
- Avoid sprinkling ad-hoc logger setup across combinators.
- Keep the hot path cheap: ``trace_event`` returns immediately unless
  ``PULLSEQ_TRACE_EVENTS`` is enabled.

Every combinator that suppresses, replaces or retries a fault reports it via
``trace_event`` so that documented fault swallowing (``catch``,
``on_error_resume_next``) is still observable.
"""
from __future__ import annotations

import logging
import json
import sys
import os
import contextlib
from logging.handlers import RotatingFileHandler
from typing import Any, Optional

from ..config import get_runtime_config
from .errors import classify_exception
from .log_support import JsonFormatter, LogContext


BASE_LOGGER_NAME = "pullseq"
_BASE_LOGGER_ATTR = "_pullseq_logger_initialized"
_CONSOLE_HANDLER_ATTR = "_pullseq_console_handler"
_FILE_HANDLER_ATTR = "_pullseq_file_handler"
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _formatter(json_mode: bool) -> logging.Formatter:
    return JsonFormatter() if json_mode else logging.Formatter(_PLAIN_FORMAT)


def _parse_level(value: int | str | None, default: int = logging.INFO) -> int:
    """Map a level name (or number) to a ``logging`` level, else ``default``."""
    if isinstance(value, int):
        return value
    if not value:
        return default
    name = value.strip().upper()
    level = logging.getLevelName("WARNING" if name == "WARN" else name)
    return level if isinstance(level, int) else default


def _ensure_base_logger(json_mode: bool) -> logging.Logger:
    """Initialize and return the shared ``pullseq`` logger.

    On repeat calls the managed console handler is re-pointed at the current
    ``sys.stderr`` (test runners swap it) and its level/formatter refreshed.
    """
    cfg = get_runtime_config()
    desired_level = _parse_level(cfg.log_level)
    logger = logging.getLogger(BASE_LOGGER_NAME)
    if getattr(logger, _BASE_LOGGER_ATTR, False):
        logger.setLevel(desired_level)
        for existing in logger.handlers:
            if not getattr(existing, _CONSOLE_HANDLER_ATTR, False):
                continue
            existing.setLevel(desired_level)
            if isinstance(existing, logging.StreamHandler) and existing.stream is not sys.stderr:
                existing.setStream(sys.stderr)
            if json_mode != isinstance(existing.formatter, JsonFormatter):
                existing.setFormatter(_formatter(json_mode))
        return logger

    logger.setLevel(desired_level)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(desired_level)
    handler.setFormatter(_formatter(json_mode))
    setattr(handler, _CONSOLE_HANDLER_ATTR, True)
    logger.handlers[:] = [handler]
    logger.propagate = False
    setattr(logger, _BASE_LOGGER_ATTR, True)
    return logger


def get_logger(name: str = BASE_LOGGER_NAME, json_mode: bool | None = None) -> logging.Logger:
    """Return ``name`` as a child of the shared, configured ``pullseq`` logger.

    ``json_mode`` defaults to the runtime config (``PULLSEQ_LOG_JSON``).
    """
    if json_mode is None:
        json_mode = get_runtime_config().json_logs
    base_logger = _ensure_base_logger(json_mode=json_mode)
    if name == BASE_LOGGER_NAME:
        return base_logger
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    return logger


def configure_logger(
    *,
    level: int | str | None = None,
    file_path: Optional[str] = None,
    json_mode: bool = True,
) -> logging.Logger:
    """Adjust the shared ``pullseq`` logger at runtime.

    ``level`` (name or number) is applied to the logger and all of its
    handlers; ``None`` keeps the current one. ``file_path`` attaches a
    rotating file handler (10 MB x 5), reusing one already pointed at the
    same file; ``None`` detaches it. Handlers this module did not create are
    never touched.
    """
    logger = get_logger(BASE_LOGGER_NAME, json_mode=json_mode)
    if level is not None:
        logger.setLevel(_parse_level(level, default=logger.level))
        for handler in logger.handlers:
            handler.setLevel(logger.level)

    target = os.path.abspath(os.path.expanduser(file_path)) if file_path else None
    keep: Optional[logging.FileHandler] = None
    for handler in [h for h in logger.handlers if getattr(h, _FILE_HANDLER_ATTR, False)]:
        if target is not None and isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            keep = handler
            continue
        logger.removeHandler(handler)
        handler.close()
    if target is None:
        return logger

    if keep is None:
        os.makedirs(os.path.dirname(target), exist_ok=True)
        keep = RotatingFileHandler(target, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
        setattr(keep, _FILE_HANDLER_ATTR, True)
        logger.addHandler(keep)
    keep.setLevel(logger.level)
    keep.setFormatter(_formatter(json_mode))
    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    level: int = logging.INFO,
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Emit a structured log event as a single JSON payload.

    Keys whose values are ``None`` are dropped unless ``keep_none`` is set.
    Exceptions passed as field values are rendered with ``repr``.
    """
    payload: dict[str, Any] = {"event": event}
    if ctx:
        payload |= ctx.to_dict()
    if keep_none:
        payload.update(fields)
    else:
        payload.update({k: v for k, v in fields.items() if v is not None})
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=repr))


def trace_event(
    event: str,
    ctx: LogContext | None = None,
    *,
    error: BaseException | None = None,
    **fields: Any,
) -> None:
    """Emit a combinator trace event when tracing is enabled.

    When ``error`` is given, its normalized ``error_code`` and type name are
    attached. This is a no-op unless ``RuntimeConfig.trace_events`` is set.
    """
    if not get_runtime_config().trace_events:
        return
    if error is not None:
        fields.setdefault("error_code", classify_exception(error).value)
        fields.setdefault("error_type", type(error).__name__)
        with contextlib.suppress(Exception):  # str() of user exceptions may raise
            fields.setdefault("error", str(error))
    log_event(get_logger(f"{BASE_LOGGER_NAME}.trace"), event, ctx, **fields)


__all__ = [
    "BASE_LOGGER_NAME",
    "LogContext",
    "get_logger",
    "configure_logger",
    "log_event",
    "trace_event",
]
