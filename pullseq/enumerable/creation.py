"""Creation operators for synchronous sequences.

Each operator returns an :class:`Enumerable` whose enumerators are built
fresh per ``get_enumerator`` call. Arguments are validated eagerly, when the
operator is called; everything user-supplied runs lazily, per enumeration.
"""

from __future__ import annotations

import inspect
import threading
from typing import Any, Callable, Coroutine, Iterable, Optional, TypeVar

from ..base.cursor import BodyState
from ..base.disposables import ActionDisposable, CompositeDisposable, release_resource
from ..base.errors import (
    ArgumentNullError,
    ArgumentOutOfRangeError,
    InvalidOperationError,
    ObjectDisposedError,
)
from ..base.logging import trace_event
from ..base.log_support import LogContext
from ..base.outcome import Outcome
from .core import (
    AnonymousEnumerable,
    AnonymousEnumerator,
    Enumerable,
    Enumerator,
    ForwardingEnumerator,
    as_enumerable,
)
from .yielder import SignalKind, Yielder

T = TypeVar("T")
S = TypeVar("S")
R = TypeVar("R")


def _require(value: Any, argument: str) -> None:
    if value is None:
        raise ArgumentNullError(argument)


def _require_count(count: Optional[int], argument: str = "count") -> None:
    if count is not None and count < 0:
        raise ArgumentOutOfRangeError(argument, f"must be non-negative, got {count}")


# return_ / repeat ----------------------------------------------------------


class _RepeatValueEnumerator(Enumerator[T]):
    operator = "repeat"

    def __init__(self, value: T, count: Optional[int]) -> None:
        super().__init__()
        self._value = value
        self._remaining = count

    def _step(self) -> Outcome[T]:
        if self._remaining is not None:
            if self._remaining == 0:
                return Outcome.completed()
            self._remaining -= 1
        return Outcome.of(self._value)


def return_(value: T) -> Enumerable[T]:
    """Single-element sequence."""
    return AnonymousEnumerable(lambda: _RepeatValueEnumerator(value, 1))


def repeat(value: T, count: Optional[int] = None) -> Enumerable[T]:
    """``value`` repeated ``count`` times, or forever when ``count`` is ``None``."""
    _require_count(count)
    return AnonymousEnumerable(lambda: _RepeatValueEnumerator(value, count))


# empty / never / throw -----------------------------------------------------


class _EmptyEnumerator(Enumerator[Any]):
    operator = "empty"

    def _step(self) -> Outcome[Any]:
        return Outcome.completed()


def empty() -> Enumerable[Any]:
    return AnonymousEnumerable(_EmptyEnumerator)


class _NeverEnumerator(Enumerator[Any]):
    """Blocks the advancing thread until another thread disposes it."""

    operator = "never"

    def __init__(self) -> None:
        super().__init__()
        self._woken = threading.Event()

    def _on_dispose(self) -> None:
        self._woken.set()

    def _step(self) -> Outcome[Any]:
        self._woken.wait()
        raise ObjectDisposedError("never() was disposed while advancing")


def never() -> Enumerable[Any]:
    """Sequence whose first advance never returns on its own."""
    return AnonymousEnumerable(_NeverEnumerator)


class _ThrowEnumerator(Enumerator[Any]):
    operator = "throw"

    def __init__(self, error: BaseException) -> None:
        super().__init__()
        self._error = error

    def _step(self) -> Outcome[Any]:
        return Outcome.fault(self._error)


def throw(error: BaseException) -> Enumerable[Any]:
    """Sequence whose first advance faults with ``error``."""
    _require(error, "error")
    return AnonymousEnumerable(lambda: _ThrowEnumerator(error))


# range_ --------------------------------------------------------------------


class _RangeEnumerator(Enumerator[int]):
    operator = "range"

    def __init__(self, start: int, count: int) -> None:
        super().__init__()
        self._next = start
        self._remaining = count

    def _step(self) -> Outcome[int]:
        if self._remaining == 0:
            return Outcome.completed()
        self._remaining -= 1
        value, self._next = self._next, self._next + 1
        return Outcome.of(value)


def range_(start: int, count: int) -> Enumerable[int]:
    """``count`` consecutive integers beginning at ``start``."""
    _require(count, "count")
    _require_count(count)
    return AnonymousEnumerable(lambda: _RangeEnumerator(start, count))


# repeat_sequence -----------------------------------------------------------


class _RepeatSequenceEnumerator(ForwardingEnumerator[T]):
    operator = "repeat_sequence"

    def __init__(self, source: Enumerable[T], count: Optional[int]) -> None:
        super().__init__()
        self._source = source
        self._remaining = count

    def _step(self) -> Outcome[T]:
        while True:
            if self._inner is None:
                if self._remaining is not None:
                    if self._remaining == 0:
                        return Outcome.completed()
                    self._remaining -= 1
                self._switch(self._source.get_enumerator())
            outcome = self._inner.advance()
            if not outcome.is_completed:
                return outcome
            self._switch(None)


def repeat_sequence(source: Iterable[T], count: Optional[int] = None) -> Enumerable[T]:
    """Enumerate ``source`` back-to-back ``count`` times (forever when ``None``).

    Every repetition acquires a new enumerator from ``source``.
    """
    seq = as_enumerable(source)
    _require_count(count)
    return AnonymousEnumerable(lambda: _RepeatSequenceEnumerator(seq, count))


# defer ---------------------------------------------------------------------


class _DeferEnumerator(ForwardingEnumerator[T]):
    operator = "defer"

    def __init__(self, factory: Callable[[], Iterable[T]]) -> None:
        super().__init__()
        self._factory: Optional[Callable[[], Iterable[T]]] = factory

    def _step(self) -> Outcome[T]:
        if self._factory is not None:
            factory, self._factory = self._factory, None
            self._switch(as_enumerable(factory(), "factory()").get_enumerator())
        return self._inner.advance()


def defer(factory: Callable[[], Iterable[T]]) -> Enumerable[T]:
    """Sequence built by ``factory`` once per enumerator, on its first advance.

    A raising ``factory`` faults that enumeration only.
    """
    _require(factory, "factory")
    return AnonymousEnumerable(lambda: _DeferEnumerator(factory))


# generate ------------------------------------------------------------------


class _GenerateEnumerator(Enumerator[R]):
    operator = "generate"

    def __init__(
        self,
        initial: S,
        condition: Callable[[S], bool],
        iterate: Callable[[S], S],
        select: Callable[[S], R],
    ) -> None:
        super().__init__()
        self._state_value = initial
        self._condition = condition
        self._iterate = iterate
        self._select = select
        self._started = False

    def _step(self) -> Outcome[R]:
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
) -> Enumerable[R]:
    """Unfold a sequence from ``initial``.

    Each advance after the first applies ``iterate``; every advance then
    tests ``condition`` and, if it holds, produces ``select(state)``.
    """
    _require(condition, "condition")
    _require(iterate, "iterate")
    _require(select, "select")
    return AnonymousEnumerable(lambda: _GenerateEnumerator(initial, condition, iterate, select))


# using ---------------------------------------------------------------------


class _UsingEnumerator(ForwardingEnumerator[T]):
    operator = "using"

    def __init__(self, inner: Enumerator[T], resource: Any) -> None:
        super().__init__()
        self._inner = inner
        self._owned = CompositeDisposable(inner, ActionDisposable(lambda: _release_used(resource, self._log_context())))

    def _step(self) -> Outcome[T]:
        return self._inner.advance()

    def _release(self) -> None:
        self._inner = None
        self._owned.dispose()


def _release_used(resource: Any, ctx: LogContext) -> None:
    trace_event("using.release", ctx, resource=type(resource).__name__)
    release_resource(resource)


class _UsingEnumerable(Enumerable[T]):
    def __init__(self, resource_factory: Callable[[], Any], sequence_factory: Callable[[Any], Iterable[T]]) -> None:
        self._resource_factory = resource_factory
        self._sequence_factory = sequence_factory

    def get_enumerator(self) -> Enumerator[T]:
        resource = self._resource_factory()
        trace_event("using.acquire", LogContext(operator="using", surface="sync"), resource=type(resource).__name__)
        try:
            inner = as_enumerable(self._sequence_factory(resource), "sequence_factory()").get_enumerator()
        except Exception:
            _release_used(resource, LogContext(operator="using", surface="sync"))
            raise
        return _UsingEnumerator(inner, resource)


def using(resource_factory: Callable[[], Any], sequence_factory: Callable[[Any], Iterable[T]]) -> Enumerable[T]:
    """Scope a resource to each enumeration.

    ``resource_factory`` runs once per ``get_enumerator`` call and the
    resource is released exactly once: when the inner sequence ends or
    faults, when the enumerator is disposed, or immediately if
    ``sequence_factory`` raises (the error then propagates from
    ``get_enumerator``).
    """
    _require(resource_factory, "resource_factory")
    _require(sequence_factory, "sequence_factory")
    return _UsingEnumerable(resource_factory, sequence_factory)


# create --------------------------------------------------------------------


class _CreateEnumerator(Enumerator[T]):
    """Drives a ``create`` body coroutine one yield at a time."""

    operator = "create"

    def __init__(self, body: Callable[[Yielder[T]], Coroutine[Any, Any, None]]) -> None:
        super().__init__()
        self._body = body
        self._yielder: Yielder[T] = Yielder()
        self._coroutine: Optional[Coroutine[Any, Any, None]] = None
        self._body_state = BodyState.NOT_STARTED

    @property
    def body_state(self) -> BodyState:
        return self._body_state

    def _step(self) -> Outcome[T]:
        if self._body_state is BodyState.COMPLETED:
            return Outcome.completed()
        if self._body_state is BodyState.NOT_STARTED:
            coroutine = self._body(self._yielder)
            if not inspect.iscoroutine(coroutine):
                self._body_state = BodyState.COMPLETED
                raise InvalidOperationError("create body must be an async function")
            self._coroutine = coroutine
            self._body_state = BodyState.SUSPENDED
        try:
            signal = self._coroutine.send(None)
        except StopIteration:
            self._body_state = BodyState.COMPLETED
            return Outcome.completed()
        except Exception:
            self._body_state = BodyState.COMPLETED
            raise
        if not self._yielder.owns(signal):
            self._body_state = BodyState.COMPLETED
            raise InvalidOperationError("a synchronous create body may only await its yielder")
        if signal.kind is SignalKind.BREAK:
            self._body_state = BodyState.COMPLETED
            return Outcome.completed()
        return Outcome.of(signal.value)

    def _release(self) -> None:
        self._body_state = BodyState.COMPLETED
        if self._coroutine is not None:
            coroutine, self._coroutine = self._coroutine, None
            coroutine.close()


def create(body: Callable[[Yielder[T]], Coroutine[Any, Any, None]]) -> Enumerable[T]:
    """Sequence produced by a generator body.

    ``body`` is an ``async def`` receiving a :class:`Yielder`; it emits with
    ``await yielder.return_(value)`` and stops early with
    ``await yielder.break_()``. Disposing the enumerator early closes the
    body so its ``finally`` blocks run.

    Example::

        async def body(y):
            for i in range(3):
                await y.return_(i)

        create(body).to_list()  # [0, 1, 2]
    """
    _require(body, "body")
    return AnonymousEnumerable(lambda: _CreateEnumerator(body))


# anonymous -----------------------------------------------------------------


def create_enumerator(
    move_next: Callable[[], bool],
    current: Optional[Callable[[], T]] = None,
    dispose: Optional[Callable[[], None]] = None,
) -> Enumerator[T]:
    """Enumerator from callables; ``dispose`` runs at most once."""
    _require(move_next, "move_next")
    return AnonymousEnumerator(move_next, current, dispose)


def create_enumerable(get_enumerator: Callable[[], Enumerator[T]]) -> Enumerable[T]:
    _require(get_enumerator, "get_enumerator")
    return AnonymousEnumerable(get_enumerator)


__all__ = [
    "BodyState",
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
