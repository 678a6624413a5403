"""pullseq.config.env
==================

Small, dependency-free helpers that parse environment variables.

Failure Modes
-------------
- Helpers never raise on unset or malformed values; they return the supplied
  default so that a bad environment cannot break enumeration.
"""

from __future__ import annotations

import os
from typing import Optional

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}
_LEVELS = {"DEBUG", "INFO", "WARN", "WARNING", "ERROR", "CRITICAL"}


def parse_env_float(name: str, default: float) -> float:
    """Parse ``name`` as a non-negative float, falling back to ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val >= 0 else default


def parse_env_bool(name: str, default: bool) -> bool:
    """Parse common truthy/falsy spellings, falling back to ``default``."""
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    return default


def parse_env_level(name: str, default: str) -> str:
    """Return an upper-cased logging level name, or ``default`` if unknown."""
    raw: Optional[str] = os.getenv(name)
    if not raw:
        return default
    value = raw.strip().upper()
    if value == "WARN":
        return "WARNING"
    return value if value in _LEVELS else default


def env_fingerprint(names: tuple[str, ...]) -> str:
    """Join the raw values of ``names`` so callers can detect env changes."""
    return "/".join(os.getenv(n, "") for n in names)


__all__ = [
    "parse_env_float",
    "parse_env_bool",
    "parse_env_level",
    "env_fingerprint",
]
