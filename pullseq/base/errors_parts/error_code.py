"""
Normalized sequence error codes (taxonomy).

Defines the `ErrorCode` enumeration used by the enumerator core, the
combinators and the structured logging helpers. Values are lowercase
snake_case and are considered a stable public contract for logging.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    ARGUMENT_NULL = "argument_null"
    ARGUMENT_OUT_OF_RANGE = "argument_out_of_range"
    INVALID_OPERATION = "invalid_operation"
    DISPOSED = "disposed"
    NOT_SUPPORTED = "not_supported"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    FAULT = "fault"


__all__ = ["ErrorCode"]
