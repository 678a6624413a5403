"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `pullseq.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .sequence_error import (
    ArgumentNullError,
    ArgumentOutOfRangeError,
    InvalidOperationError,
    NotSupportedError,
    ObjectDisposedError,
    SequenceError,
)
from .classification import classify_exception

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
