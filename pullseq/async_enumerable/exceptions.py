"""Error-recovery operators for asynchronous sequences.

Mirror of :mod:`pullseq.enumerable.exceptions`. A cancelled advance is a
fault like any other on the outcome channel, but ``catch`` and
``on_error_resume_next`` never treat one as recoverable: cancellation always
reaches the consumer.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Iterable, Optional, Type, TypeVar

from ..base.cancellation import CancellationToken, CancelledError
from ..base.disposables import ActionDisposable, CompositeDisposable
from ..base.errors import ArgumentNullError, ArgumentOutOfRangeError
from ..base.logging import trace_event
from ..base.outcome import Outcome
from .core import (
    AnonymousAsyncEnumerable,
    AsyncChainEnumerator,
    AsyncEnumerable,
    AsyncForwardingEnumerator,
    as_async_enumerable,
    maybe_await,
    sources_argument,
)

T = TypeVar("T")

_Token = Optional[CancellationToken]


def _recoverable(error: Optional[BaseException]) -> bool:
    return not isinstance(error, CancelledError)


class _CatchEnumerator(AsyncForwardingEnumerator[T]):
    operator = "catch"

    def __init__(self, source: AsyncEnumerable[T], handler, exception_type: Type[BaseException]) -> None:
        super().__init__()
        self._source = source
        self._handler = handler
        self._exception_type = exception_type
        self._handled = False

    async def _step(self, token: _Token) -> Outcome[T]:
        if self._inner is None:
            self._switch(self._source.get_async_enumerator())
        outcome = await self._inner.advance(token)
        if (
            self._handled
            or not outcome.is_fault
            or not _recoverable(outcome.error)
            or not isinstance(outcome.error, self._exception_type)
        ):
            return outcome
        self._handled = True
        trace_event("catch.handled", self._log_context(), error=outcome.error)
        replacement = as_async_enumerable(await maybe_await(self._handler(outcome.error)), "handler()")
        self._switch(replacement.get_async_enumerator())
        return await self._inner.advance(token)


def catch(
    source: Any,
    handler: Callable[[BaseException], Any],
    exception_type: Type[BaseException] = Exception,
) -> AsyncEnumerable[T]:
    """Continue with ``handler(error)`` once ``source`` faults with ``exception_type``.

    ``handler`` may be sync or async.
    """
    seq = as_async_enumerable(source)
    if handler is None:
        raise ArgumentNullError("handler")
    if exception_type is None:
        raise ArgumentNullError("exception_type")
    return AnonymousAsyncEnumerable(lambda: _CatchEnumerator(seq, handler, exception_type))


class _CatchManyEnumerator(AsyncChainEnumerator[T]):
    operator = "catch_many"

    def __init__(self, sources: Iterable[Any]) -> None:
        super().__init__(sources)
        self._last_error: Optional[BaseException] = None

    def _on_inner_completed(self) -> bool:
        self._last_error = None
        return True

    def _on_inner_fault(self, error: BaseException) -> Optional[Outcome[T]]:
        if not _recoverable(error):
            return Outcome.fault(error)
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


def catch_many(*sources: Any) -> AsyncEnumerable[T]:
    """Enumerate ``sources`` in order until one of them completes without fault."""
    chain = sources_argument(sources)
    return AnonymousAsyncEnumerable(lambda: _CatchManyEnumerator(chain))


def retry(source: Any, count: Optional[int] = None) -> AsyncEnumerable[T]:
    """Re-enumerate ``source`` after a fault, up to ``count`` attempts in total."""
    seq = as_async_enumerable(source)
    if count is not None and count < 0:
        raise ArgumentOutOfRangeError("count", f"must be non-negative, got {count}")

    def attempts() -> Iterable[AsyncEnumerable[T]]:
        return itertools.repeat(seq) if count is None else itertools.repeat(seq, count)

    return AnonymousAsyncEnumerable(lambda: _RetryEnumerator(attempts()))


class _ResumeNextEnumerator(AsyncChainEnumerator[T]):
    operator = "on_error_resume_next"

    def _on_inner_fault(self, error: BaseException) -> Optional[Outcome[T]]:
        if not _recoverable(error):
            return Outcome.fault(error)
        trace_event("on_error_resume_next.swallowed", self._log_context(attempt=self._attempt), error=error)
        return None


def on_error_resume_next(*sources: Any) -> AsyncEnumerable[T]:
    """Concatenate ``sources``, moving past any fault other than cancellation."""
    chain = sources_argument(sources)
    return AnonymousAsyncEnumerable(lambda: _ResumeNextEnumerator(chain))


class _FinallyEnumerator(AsyncForwardingEnumerator[T]):
    operator = "finally"

    def __init__(self, source: AsyncEnumerable[T], action: Callable[[], None]) -> None:
        super().__init__()
        self._source = source
        self._owned = CompositeDisposable(ActionDisposable(lambda: self._switch(None)), ActionDisposable(action))

    async def _step(self, token: _Token) -> Outcome[T]:
        if self._inner is None:
            self._switch(self._source.get_async_enumerator())
        return await self._inner.advance(token)

    def _release(self) -> None:
        self._owned.dispose()


def finally_(source: Any, action: Callable[[], None]) -> AsyncEnumerable[T]:
    """Run the synchronous ``action`` once when the enumeration ends, faults, or is disposed."""
    seq = as_async_enumerable(source)
    if action is None:
        raise ArgumentNullError("action")
    return AnonymousAsyncEnumerable(lambda: _FinallyEnumerator(seq, action))


__all__ = [
    "catch",
    "catch_many",
    "retry",
    "on_error_resume_next",
    "finally_",
]
