"""Error-recovery operators for synchronous sequences.

Faults travel as ``Outcome.fault`` between enumerators, so every operator
here decides on the tagged outcome of its inner advance rather than by
catching. Only ``catch`` (for a matching fault) and ``on_error_resume_next``
suppress faults, and both report what they suppress via ``trace_event``.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Iterable, Optional, Type, TypeVar

from ..base.disposables import ActionDisposable, CompositeDisposable
from ..base.errors import ArgumentNullError, ArgumentOutOfRangeError
from ..base.logging import trace_event
from ..base.outcome import Outcome
from .core import (
    AnonymousEnumerable,
    ChainEnumerator,
    Enumerable,
    ForwardingEnumerator,
    as_enumerable,
    sources_argument,
)

T = TypeVar("T")


# catch ---------------------------------------------------------------------


class _CatchEnumerator(ForwardingEnumerator[T]):
    operator = "catch"

    def __init__(
        self,
        source: Enumerable[T],
        handler: Callable[[BaseException], Iterable[T]],
        exception_type: Type[BaseException],
    ) -> None:
        super().__init__()
        self._source = source
        self._handler = handler
        self._exception_type = exception_type
        self._handled = False

    def _step(self) -> Outcome[T]:
        if self._inner is None:
            self._switch(self._source.get_enumerator())
        outcome = self._inner.advance()
        if self._handled or not outcome.is_fault or not isinstance(outcome.error, self._exception_type):
            return outcome
        self._handled = True
        trace_event("catch.handled", self._log_context(), error=outcome.error)
        replacement = as_enumerable(self._handler(outcome.error), "handler()")
        self._switch(replacement.get_enumerator())
        return self._inner.advance()


def catch(
    source: Iterable[T],
    handler: Callable[[BaseException], Iterable[T]],
    exception_type: Type[BaseException] = Exception,
) -> Enumerable[T]:
    """Continue with ``handler(error)`` when ``source`` faults with ``exception_type``.

    The switch happens at most once. Faults of other types, and faults of the
    handler's sequence, pass through unchanged.
    """
    seq = as_enumerable(source)
    if handler is None:
        raise ArgumentNullError("handler")
    if exception_type is None:
        raise ArgumentNullError("exception_type")
    return AnonymousEnumerable(lambda: _CatchEnumerator(seq, handler, exception_type))


# catch_many / retry --------------------------------------------------------


class _CatchManyEnumerator(ChainEnumerator[T]):
    """Moves to the next source on fault and stops at the first clean completion."""

    operator = "catch_many"

    def __init__(self, sources: Iterable[Any]) -> None:
        super().__init__(sources)
        self._last_error: Optional[BaseException] = None

    def _on_inner_completed(self) -> bool:
        self._last_error = None
        return True

    def _on_inner_fault(self, error: BaseException) -> Optional[Outcome[T]]:
        self._last_error = error
        trace_event("catch_many.fault", self._log_context(attempt=self._attempt), error=error)
        return None

    def _on_exhausted(self) -> Outcome[T]:
        if self._last_error is not None:
            return Outcome.fault(self._last_error)
        return Outcome.completed()


class _RetryEnumerator(_CatchManyEnumerator[T]):
    operator = "retry"

    def _on_attempt(self, attempt: int) -> None:
        if attempt > 1:
            trace_event("retry.attempt", self._log_context(attempt=attempt))


def catch_many(*sources: Any) -> Enumerable[T]:
    """Enumerate ``sources`` in order until one of them completes without fault.

    Values produced before a fault are kept. When every source faulted, the
    last fault surfaces. Pass either two or more sequences, or a single
    iterable of sequences.
    """
    chain = sources_argument(sources)
    return AnonymousEnumerable(lambda: _CatchManyEnumerator(chain))


def retry(source: Iterable[T], count: Optional[int] = None) -> Enumerable[T]:
    """Re-enumerate ``source`` from the start after a fault.

    ``count`` is the total number of attempts (unbounded when ``None``). Each
    attempt acquires a fresh enumerator; nothing is cached between attempts.
    """
    seq = as_enumerable(source)
    if count is not None and count < 0:
        raise ArgumentOutOfRangeError("count", f"must be non-negative, got {count}")

    def attempts() -> Iterable[Enumerable[T]]:
        return itertools.repeat(seq) if count is None else itertools.repeat(seq, count)

    return AnonymousEnumerable(lambda: _RetryEnumerator(attempts()))


# on_error_resume_next ------------------------------------------------------


class _ResumeNextEnumerator(ChainEnumerator[T]):
    operator = "on_error_resume_next"

    def _on_inner_fault(self, error: BaseException) -> Optional[Outcome[T]]:
        trace_event("on_error_resume_next.swallowed", self._log_context(attempt=self._attempt), error=error)
        return None


def on_error_resume_next(*sources: Any) -> Enumerable[T]:
    """Concatenate ``sources``, silently moving past any fault.

    Requires two or more sequences, or a single iterable of sequences. The
    result never faults; every swallowed fault is traced.
    """
    chain = sources_argument(sources)
    return AnonymousEnumerable(lambda: _ResumeNextEnumerator(chain))


# finally_ ------------------------------------------------------------------


class _FinallyEnumerator(ForwardingEnumerator[T]):
    operator = "finally"

    def __init__(self, source: Enumerable[T], action: Callable[[], None]) -> None:
        super().__init__()
        self._source = source
        self._owned = CompositeDisposable(ActionDisposable(lambda: self._switch(None)), ActionDisposable(action))

    def _step(self) -> Outcome[T]:
        if self._inner is None:
            self._switch(self._source.get_enumerator())
        return self._inner.advance()

    def _release(self) -> None:
        self._owned.dispose()


def finally_(source: Iterable[T], action: Callable[[], None]) -> Enumerable[T]:
    """Run ``action`` once when the enumeration ends, faults, or is disposed."""
    seq = as_enumerable(source)
    if action is None:
        raise ArgumentNullError("action")
    return AnonymousEnumerable(lambda: _FinallyEnumerator(seq, action))


__all__ = [
    "catch",
    "catch_many",
    "retry",
    "on_error_resume_next",
    "finally_",
]

