"""Runtime configuration layer.

Goals
-----
* Centralize defaults (``pullseq.config.defaults``).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults
    2. Environment variables (``PULLSEQ_*``)
    3. In-code overrides passed to ``get_runtime_config``
* Avoid per-call env parsing: the parsed config is cached and only rebuilt
  when one of the ``PULLSEQ_*`` variables changes.

Environment Variables
---------------------
PULLSEQ_LOG_LEVEL              level of the shared ``pullseq`` logger
PULLSEQ_LOG_JSON               ``1``/``0``: JSON or plain log lines
PULLSEQ_TRACE_EVENTS           ``1`` to emit combinator trace events
PULLSEQ_CANCEL_GRACE_SECONDS   unwind grace for cancelled async steps

Public API
----------
* RuntimeConfig
* get_runtime_config(overrides: dict | None = None) -> RuntimeConfig
* reset_runtime_config() -> None
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .defaults import (
    DEFAULT_CANCEL_GRACE_SECONDS,
    DEFAULT_JSON_LOGS,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TRACE_EVENTS,
    ENV_CANCEL_GRACE_SECONDS,
    ENV_JSON_LOGS,
    ENV_LOG_LEVEL,
    ENV_TRACE_EVENTS,
    ENV_VARS,
)
from .env import env_fingerprint, parse_env_bool, parse_env_float, parse_env_level


class RuntimeConfig(BaseModel):
    """Validated, immutable runtime settings.

    Attributes:
        log_level: Level name applied to the shared ``pullseq`` logger.
        json_logs: Whether managed handlers use the JSON formatter.
        trace_events: Whether combinators emit structured trace events.
        cancel_grace_seconds: How long a cancelled async advance waits for
            its step to unwind before reporting the cancellation fault.
    """

    model_config = ConfigDict(frozen=True)

    log_level: str = DEFAULT_LOG_LEVEL
    json_logs: bool = DEFAULT_JSON_LOGS
    trace_events: bool = DEFAULT_TRACE_EVENTS
    cancel_grace_seconds: float = Field(default=DEFAULT_CANCEL_GRACE_SECONDS, ge=0)

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()


_CACHED: RuntimeConfig | None = None
_ENV_GUARD: str | None = None


def _from_env() -> Dict[str, Any]:
    return {
        "log_level": parse_env_level(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
        "json_logs": parse_env_bool(ENV_JSON_LOGS, DEFAULT_JSON_LOGS),
        "trace_events": parse_env_bool(ENV_TRACE_EVENTS, DEFAULT_TRACE_EVENTS),
        "cancel_grace_seconds": parse_env_float(
            ENV_CANCEL_GRACE_SECONDS, DEFAULT_CANCEL_GRACE_SECONDS
        ),
    }


def get_runtime_config(overrides: Optional[Dict[str, Any]] = None) -> RuntimeConfig:
    """Return the process-cached ``RuntimeConfig``.

    Merge order (later wins): defaults -> env vars -> overrides. Calls with
    ``overrides`` build a fresh config and do not touch the cache.
    """
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - documented module cache
    guard = env_fingerprint(ENV_VARS)
    if overrides:
        merged = _from_env() | {k: v for k, v in overrides.items() if v is not None}
        return RuntimeConfig(**merged)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    _CACHED = RuntimeConfig(**_from_env())
    _ENV_GUARD = guard
    return _CACHED


def reset_runtime_config() -> None:
    """Drop the cached config so the next call re-reads the environment."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603
    _CACHED = None
    _ENV_GUARD = None


__all__ = [
    "RuntimeConfig",
    "get_runtime_config",
    "reset_runtime_config",
]
