"""Unified sequence error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``pullseq.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.sequence_error import (
    ArgumentNullError,
    ArgumentOutOfRangeError,
    InvalidOperationError,
    NotSupportedError,
    ObjectDisposedError,
    SequenceError,
)
from .errors_parts.classification import classify_exception

__all__ = [
    "ErrorCode",
    "SequenceError",
    "ArgumentNullError",
    "ArgumentOutOfRangeError",
    "InvalidOperationError",
    "ObjectDisposedError",
    "NotSupportedError",
    "classify_exception",
]
