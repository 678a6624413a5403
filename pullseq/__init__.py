"""pullseq package

Pull-based lazy sequences with a synchronous and an asynchronous surface.

Purpose:
    Provide restartable, disposal-safe sequences whose enumerators report
    each advance as a tagged outcome (value, end, or fault), plus creation
    and error-recovery operators built only on that protocol.

Public API (re-exported):
    - Version: ``__version__``
    - Surfaces: :mod:`pullseq.enumerable`, :mod:`pullseq.async_enumerable`
    - Core types: ``Enumerable``, ``Enumerator``, ``AsyncEnumerable``,
      ``AsyncEnumerator``, ``Outcome``, ``EnumeratorState``
    - Cancellation: ``CancellationToken``, ``CancelledError``
    - Errors: ``SequenceError`` and its subclasses, ``ErrorCode``

Notes:
    - Operators are module-level functions on each surface and are also
      available in fluent form on the sequence classes.
"""

from . import async_enumerable, enumerable
from .async_enumerable import AsyncEnumerable, AsyncEnumerator
from .base.cancellation import CancellationToken, CancelledError
from .base.cursor import EnumeratorState
from .base.errors import (
    ArgumentNullError,
    ArgumentOutOfRangeError,
    ErrorCode,
    InvalidOperationError,
    NotSupportedError,
    ObjectDisposedError,
    SequenceError,
)
from .base.outcome import Outcome, OutcomeKind
from .enumerable import Enumerable, Enumerator

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "enumerable",
    "async_enumerable",
    "Enumerable",
    "Enumerator",
    "AsyncEnumerable",
    "AsyncEnumerator",
    "Outcome",
    "OutcomeKind",
    "EnumeratorState",
    "CancellationToken",
    "CancelledError",
    "ErrorCode",
    "SequenceError",
    "ArgumentNullError",
    "ArgumentOutOfRangeError",
    "InvalidOperationError",
    "ObjectDisposedError",
    "NotSupportedError",
]
