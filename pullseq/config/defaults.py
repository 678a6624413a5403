"""Centralized runtime defaults.

Single source of truth for values that ``RuntimeConfig`` falls back to when
the corresponding environment variable is unset or invalid.
"""

from __future__ import annotations

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_JSON_LOGS = True
DEFAULT_TRACE_EVENTS = False
# Time an async advance waits for a cancelled step to unwind before it
# reports the cancellation fault anyway.
DEFAULT_CANCEL_GRACE_SECONDS = 1.0

ENV_LOG_LEVEL = "PULLSEQ_LOG_LEVEL"
ENV_JSON_LOGS = "PULLSEQ_LOG_JSON"
ENV_TRACE_EVENTS = "PULLSEQ_TRACE_EVENTS"
ENV_CANCEL_GRACE_SECONDS = "PULLSEQ_CANCEL_GRACE_SECONDS"

ENV_VARS = (
    ENV_LOG_LEVEL,
    ENV_JSON_LOGS,
    ENV_TRACE_EVENTS,
    ENV_CANCEL_GRACE_SECONDS,
)

__all__ = [
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_JSON_LOGS",
    "DEFAULT_TRACE_EVENTS",
    "DEFAULT_CANCEL_GRACE_SECONDS",
    "ENV_LOG_LEVEL",
    "ENV_JSON_LOGS",
    "ENV_TRACE_EVENTS",
    "ENV_CANCEL_GRACE_SECONDS",
    "ENV_VARS",
]
