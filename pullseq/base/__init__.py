"""
pullseq Base Package

Surface-agnostic building blocks shared by ``pullseq.enumerable`` and
``pullseq.async_enumerable``:

- Errors: ``ErrorCode`` taxonomy and structured sequence exceptions
- Cancellation: cooperative, cascading ``CancellationToken``
- Disposables: run-once release helpers for owned resources
- Outcome: tagged result of a single advance
- Cursor: the enumerator state machine both surfaces build on
"""

from .errors import (
    ArgumentNullError,
    ArgumentOutOfRangeError,
    ErrorCode,
    InvalidOperationError,
    NotSupportedError,
    ObjectDisposedError,
    SequenceError,
    classify_exception,
)
from .cancellation import CancellationCallback, CancellationToken, CancelledError
from .disposables import (
    ActionDisposable,
    CompositeDisposable,
    Disposable,
    is_releasable,
    release_resource,
)
from .outcome import Outcome, OutcomeKind
from .cursor import BodyState, Cursor, EnumeratorState

__all__ = [
    "ErrorCode",
    "SequenceError",
    "ArgumentNullError",
    "ArgumentOutOfRangeError",
    "InvalidOperationError",
    "ObjectDisposedError",
    "NotSupportedError",
    "classify_exception",
    "CancellationToken",
    "CancellationCallback",
    "CancelledError",
    "ActionDisposable",
    "CompositeDisposable",
    "Disposable",
    "is_releasable",
    "release_resource",
    "Outcome",
    "OutcomeKind",
    "BodyState",
    "Cursor",
    "EnumeratorState",
]
