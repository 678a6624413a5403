"""
Structured sequence error exception types.

`SequenceError` carries a normalized `ErrorCode` so that argument validation
and invalid-usage failures can be told apart from production faults raised by
user code. The concrete subclasses also derive from the matching builtin
(`ValueError`, `RuntimeError`) so callers may catch them the usual way.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class SequenceError(Exception):
    """Represents a structured library error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        argument: Name of the offending argument, when the error is an
            argument validation failure.
    """

    code: ErrorCode
    message: str
    argument: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining code, argument, and message."""
        if self.argument:
            return f"{self.code.value} ({self.argument}): {self.message}"
        return f"{self.code.value}: {self.message}"


class ArgumentNullError(SequenceError, ValueError):
    """A required argument was ``None``."""

    def __init__(self, argument: str, message: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.ARGUMENT_NULL,
            message=message or "value cannot be None",
            argument=argument,
        )


class ArgumentOutOfRangeError(SequenceError, ValueError):
    """A numeric argument was outside its permitted range."""

    def __init__(self, argument: str, message: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.ARGUMENT_OUT_OF_RANGE,
            message=message or "value is out of range",
            argument=argument,
        )


class InvalidOperationError(SequenceError, RuntimeError):
    """The enumerator is not in a state that permits the requested call."""

    def __init__(self, message: str, *, code: ErrorCode = ErrorCode.INVALID_OPERATION) -> None:
        super().__init__(code=code, message=message)


class ObjectDisposedError(InvalidOperationError):
    """The enumerator was used after it had been disposed."""

    def __init__(self, message: str = "enumerator has been disposed") -> None:
        super().__init__(message, code=ErrorCode.DISPOSED)


class NotSupportedError(SequenceError):
    """The requested operation is not supported by this enumerator."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.NOT_SUPPORTED, message=message)


__all__ = [
    "SequenceError",
    "ArgumentNullError",
    "ArgumentOutOfRangeError",
    "InvalidOperationError",
    "ObjectDisposedError",
    "NotSupportedError",
]
