"""Creation operators for asynchronous sequences.

Same contracts as :mod:`pullseq.enumerable.creation`. Factories and
callbacks are plain callables; ``defer`` additionally accepts a factory that
returns an awaitable.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Coroutine, Optional, TypeVar

from ..base.cancellation import CancellationToken
from ..base.cursor import BodyState
from ..base.disposables import ActionDisposable, CompositeDisposable, release_resource
from ..base.errors import ArgumentNullError, ArgumentOutOfRangeError
from ..base.log_support import LogContext
from ..base.logging import trace_event
from ..base.outcome import Outcome
from .core import (
    AnonymousAsyncEnumerable,
    AnonymousAsyncEnumerator,
    AsyncEnumerable,
    AsyncEnumerator,
    AsyncForwardingEnumerator,
    as_async_enumerable,
    maybe_await,
)
from .yielder import AsyncYielder

T = TypeVar("T")
S = TypeVar("S")
R = TypeVar("R")

_Token = Optional[CancellationToken]


def _require(value: Any, argument: str) -> None:
    if value is None:
        raise ArgumentNullError(argument)


def _require_count(count: Optional[int], argument: str = "count") -> None:
    if count is not None and count < 0:
        raise ArgumentOutOfRangeError(argument, f"must be non-negative, got {count}")


class _RepeatValueEnumerator(AsyncEnumerator[T]):
    operator = "repeat"

    def __init__(self, value: T, count: Optional[int]) -> None:
        super().__init__()
        self._value = value
        self._remaining = count

    async def _step(self, token: _Token) -> Outcome[T]:
        if self._remaining is not None:
            if self._remaining == 0:
                return Outcome.completed()
            self._remaining -= 1
        return Outcome.of(self._value)


def return_(value: T) -> AsyncEnumerable[T]:
    return AnonymousAsyncEnumerable(lambda: _RepeatValueEnumerator(value, 1))


def repeat(value: T, count: Optional[int] = None) -> AsyncEnumerable[T]:
    _require_count(count)
    return AnonymousAsyncEnumerable(lambda: _RepeatValueEnumerator(value, count))


class _EmptyEnumerator(AsyncEnumerator[Any]):
    operator = "empty"

    async def _step(self, token: _Token) -> Outcome[Any]:
        return Outcome.completed()


def empty() -> AsyncEnumerable[Any]:
    return AnonymousAsyncEnumerable(_EmptyEnumerator)


class _NeverEnumerator(AsyncEnumerator[Any]):
    operator = "never"

    async def _step(self, token: _Token) -> Outcome[Any]:
        await asyncio.get_running_loop().create_future()
        return Outcome.completed()  # pragma: no cover - the future never resolves


def never() -> AsyncEnumerable[Any]:
    """Sequence whose advance stays pending until cancelled or disposed."""
    return AnonymousAsyncEnumerable(_NeverEnumerator)


class _ThrowEnumerator(AsyncEnumerator[Any]):
    operator = "throw"

    def __init__(self, error: BaseException) -> None:
        super().__init__()
        self._error = error

    async def _step(self, token: _Token) -> Outcome[Any]:
        return Outcome.fault(self._error)


def throw(error: BaseException) -> AsyncEnumerable[Any]:
    _require(error, "error")
    return AnonymousAsyncEnumerable(lambda: _ThrowEnumerator(error))


class _RangeEnumerator(AsyncEnumerator[int]):
    operator = "range"

    def __init__(self, start: int, count: int) -> None:
        super().__init__()
        self._next = start
        self._remaining = count

    async def _step(self, token: _Token) -> Outcome[int]:
        if self._remaining == 0:
            return Outcome.completed()
        self._remaining -= 1
        value, self._next = self._next, self._next + 1
        return Outcome.of(value)


def range_(start: int, count: int) -> AsyncEnumerable[int]:
    _require(count, "count")
    _require_count(count)
    return AnonymousAsyncEnumerable(lambda: _RangeEnumerator(start, count))


class _RepeatSequenceEnumerator(AsyncForwardingEnumerator[T]):
    operator = "repeat_sequence"

    def __init__(self, source: AsyncEnumerable[T], count: Optional[int]) -> None:
        super().__init__()
        self._source = source
        self._remaining = count

    async def _step(self, token: _Token) -> Outcome[T]:
        while True:
            if self._inner is None:
                if self._remaining is not None:
                    if self._remaining == 0:
                        return Outcome.completed()
                    self._remaining -= 1
                self._switch(self._source.get_async_enumerator())
            outcome = await self._inner.advance(token)
            if not outcome.is_completed:
                return outcome
            self._switch(None)


def repeat_sequence(source: Any, count: Optional[int] = None) -> AsyncEnumerable[T]:
    seq = as_async_enumerable(source)
    _require_count(count)
    return AnonymousAsyncEnumerable(lambda: _RepeatSequenceEnumerator(seq, count))


class _DeferEnumerator(AsyncForwardingEnumerator[T]):
    operator = "defer"

    def __init__(self, factory: Callable[[], Any]) -> None:
        super().__init__()
        self._factory: Optional[Callable[[], Any]] = factory

    async def _step(self, token: _Token) -> Outcome[T]:
        if self._factory is not None:
            factory, self._factory = self._factory, None
            produced = await maybe_await(factory())
            self._switch(as_async_enumerable(produced, "factory()").get_async_enumerator())
        return await self._inner.advance(token)


def defer(factory: Callable[[], Any]) -> AsyncEnumerable[T]:
    """Sequence built by ``factory`` once per enumerator, on its first advance.

    ``factory`` may return a sequence or an awaitable resolving to one.
    """
    _require(factory, "factory")
    return AnonymousAsyncEnumerable(lambda: _DeferEnumerator(factory))


class _GenerateEnumerator(AsyncEnumerator[R]):
    operator = "generate"

    def __init__(self, initial, condition, iterate, select) -> None:
        super().__init__()
        self._state_value = initial
        self._condition = condition
        self._iterate = iterate
        self._select = select
        self._started = False

    async def _step(self, token: _Token) -> Outcome[R]:
        if self._started:
            self._state_value = self._iterate(self._state_value)
        self._started = True
        if not self._condition(self._state_value):
            return Outcome.completed()
        return Outcome.of(self._select(self._state_value))


def generate(
    initial: S,
    condition: Callable[[S], bool],
    iterate: Callable[[S], S],
    select: Callable[[S], R],
) -> AsyncEnumerable[R]:
    _require(condition, "condition")
    _require(iterate, "iterate")
    _require(select, "select")
    return AnonymousAsyncEnumerable(lambda: _GenerateEnumerator(initial, condition, iterate, select))


class _UsingEnumerator(AsyncForwardingEnumerator[T]):
    operator = "using"

    def __init__(self, inner: AsyncEnumerator[T], resource: Any) -> None:
        super().__init__()
        self._inner = inner
        self._owned = CompositeDisposable(inner, ActionDisposable(lambda: _release_used(resource, self._log_context())))

    async def _step(self, token: _Token) -> Outcome[T]:
        return await self._inner.advance(token)

    def _release(self) -> None:
        self._inner = None
        self._owned.dispose()


def _release_used(resource: Any, ctx: LogContext) -> None:
    trace_event("using.release", ctx, resource=type(resource).__name__)
    release_resource(resource)


class _UsingEnumerable(AsyncEnumerable[T]):
    def __init__(self, resource_factory: Callable[[], Any], sequence_factory: Callable[[Any], Any]) -> None:
        self._resource_factory = resource_factory
        self._sequence_factory = sequence_factory

    def get_async_enumerator(self) -> AsyncEnumerator[T]:
        ctx = LogContext(operator="using", surface="async")
        resource = self._resource_factory()
        trace_event("using.acquire", ctx, resource=type(resource).__name__)
        try:
            inner = as_async_enumerable(self._sequence_factory(resource), "sequence_factory()").get_async_enumerator()
        except Exception:
            _release_used(resource, ctx)
            raise
        return _UsingEnumerator(inner, resource)


def using(resource_factory: Callable[[], Any], sequence_factory: Callable[[Any], Any]) -> AsyncEnumerable[T]:
    """Scope a resource to each enumeration.

    The resource is released exactly once: at the end or fault of the inner
    sequence, on dispose, on a cancelled advance, or immediately if
    ``sequence_factory`` raises.
    """
    _require(resource_factory, "resource_factory")
    _require(sequence_factory, "sequence_factory")
    return _UsingEnumerable(resource_factory, sequence_factory)


class _CreateEnumerator(AsyncEnumerator[T]):
    """Drives a ``create`` body task through an :class:`AsyncYielder`."""

    operator = "create"

    def __init__(self, body: Callable[[AsyncYielder[T]], Coroutine[Any, Any, None]]) -> None:
        super().__init__()
        self._body = body
        self._yielder: AsyncYielder[T] = AsyncYielder()
        self._task: Optional[asyncio.Task[None]] = None
        self._body_state = BodyState.NOT_STARTED

    @property
    def body_state(self) -> BodyState:
        return self._body_state

    async def _run(self) -> None:
        try:
            await self._body(self._yielder)
        except Exception as exc:
            self._yielder._publish(Outcome.fault(exc))
            return
        self._yielder._publish(Outcome.completed())

    async def _step(self, token: _Token) -> Outcome[T]:
        if self._body_state is BodyState.COMPLETED:
            return Outcome.completed()
        signal = self._yielder._expect()
        if self._task is None:
            self._body_state = BodyState.SUSPENDED
            self._task = asyncio.get_running_loop().create_task(self._run())
        else:
            self._yielder._continue()
        outcome = await signal
        if outcome.is_terminal:
            self._body_state = BodyState.COMPLETED
        return outcome

    def _release(self) -> None:
        self._body_state = BodyState.COMPLETED
        if self._task is not None and not self._task.done():
            self._task.cancel()


def create(body: Callable[[AsyncYielder[T]], Awaitable[None]]) -> AsyncEnumerable[T]:
    """Sequence produced by an async generator body.

    ``body(yielder)`` runs as a task; ``await yielder.return_(value)`` emits
    and ``await yielder.break_()`` ends the sequence. Disposing early cancels
    the task so its ``finally`` blocks run on the next loop iteration.
    """
    _require(body, "body")
    return AnonymousAsyncEnumerable(lambda: _CreateEnumerator(body))


def create_enumerator(
    move_next: Callable[[_Token], Awaitable[bool]],
    current: Optional[Callable[[], T]] = None,
    dispose: Optional[Callable[[], None]] = None,
) -> AsyncEnumerator[T]:
    _require(move_next, "move_next")
    return AnonymousAsyncEnumerator(move_next, current, dispose)


def create_enumerable(get_enumerator: Callable[[], AsyncEnumerator[T]]) -> AsyncEnumerable[T]:
    _require(get_enumerator, "get_enumerator")
    return AnonymousAsyncEnumerable(get_enumerator)


__all__ = [
    "return_",
    "empty",
    "never",
    "throw",
    "range_",
    "repeat",
    "repeat_sequence",
    "defer",
    "generate",
    "using",
    "create",
    "create_enumerator",
    "create_enumerable",
]

