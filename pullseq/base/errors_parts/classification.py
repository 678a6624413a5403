"""
Error classification helpers mapping exceptions to normalized ErrorCode values.

Used by the structured logging layer to attach a stable ``error_code`` field
to fault, retry and cancellation events.
"""
from __future__ import annotations

import asyncio

from ..cancellation_parts.cancelled_error import CancelledError
from .error_code import ErrorCode
from .sequence_error import SequenceError


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. SequenceError passthrough.
        2. Cooperative or asyncio cancellation.
        3. Timeout exceptions (sync/async).
        4. ``FAULT`` fallback for anything raised by user code.
    """
    if isinstance(exc, SequenceError):
        return exc.code
    if isinstance(exc, (CancelledError, asyncio.CancelledError)):
        return ErrorCode.CANCELLED
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    return ErrorCode.FAULT


__all__ = ["classify_exception"]
