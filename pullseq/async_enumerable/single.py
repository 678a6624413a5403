"""Helper operators and terminal drivers for asynchronous sequences.

Callbacks (``selector``, ``predicate``, ``on_next``...) may be plain
functions or coroutine functions.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Deque, List, Optional, TypeVar

from ..base.cancellation import CancellationToken
from ..base.errors import ArgumentNullError, ArgumentOutOfRangeError
from ..base.outcome import Outcome
from .core import (
    AnonymousAsyncEnumerable,
    AsyncChainEnumerator,
    AsyncEnumerable,
    AsyncForwardingEnumerator,
    IterableAsyncEnumerable,
    as_async_enumerable,
    maybe_await,
    sources_argument,
)

T = TypeVar("T")
R = TypeVar("R")

_Token = Optional[CancellationToken]

_NO_SEED = object()


def _require(value: Any, argument: str) -> None:
    if value is None:
        raise ArgumentNullError(argument)


class _PipeEnumerator(AsyncForwardingEnumerator[Any]):
    def __init__(self, source: AsyncEnumerable[Any]) -> None:
        super().__init__()
        self._source = source

    async def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        return Outcome.of(value)

    async def _on_end(self, outcome: Outcome[Any]) -> Outcome[Any]:
        return outcome

    async def _step(self, token: _Token) -> Outcome[Any]:
        if self._inner is None:
            self._switch(self._source.get_async_enumerator())
        while True:
            outcome = await self._inner.advance(token)
            if not outcome.has_value:
                return await self._on_end(outcome)
            mapped = await self._on_value(outcome.value)
            if mapped is not None:
                return mapped


def _pipe(source: Any, factory: Callable[[AsyncEnumerable[Any]], _PipeEnumerator]) -> AsyncEnumerable[Any]:
    seq = as_async_enumerable(source)
    return AnonymousAsyncEnumerable(lambda: factory(seq))


class _ConcatEnumerator(AsyncChainEnumerator[T]):
    operator = "concat"


def concat(*sources: Any) -> AsyncEnumerable[T]:
    chain = sources_argument(sources)
    return AnonymousAsyncEnumerable(lambda: _ConcatEnumerator(chain))


def start_with(source: Any, *values: T) -> AsyncEnumerable[T]:
    seq = as_async_enumerable(source)
    prefix = IterableAsyncEnumerable(tuple(values))
    return AnonymousAsyncEnumerable(lambda: _ConcatEnumerator((prefix, seq)))


class _DoEnumerator(_PipeEnumerator):
    operator = "do"

    def __init__(self, source, on_next, on_error, on_completed) -> None:
        super().__init__(source)
        self._on_next = on_next
        self._on_error = on_error
        self._on_completed = on_completed

    async def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        await maybe_await(self._on_next(value))
        return Outcome.of(value)

    async def _on_end(self, outcome: Outcome[Any]) -> Outcome[Any]:
        if outcome.is_fault and self._on_error is not None:
            await maybe_await(self._on_error(outcome.error))
        elif outcome.is_completed and self._on_completed is not None:
            await maybe_await(self._on_completed())
        return outcome


def do(
    source: Any,
    on_next: Callable[[T], Any],
    on_error: Optional[Callable[[BaseException], Any]] = None,
    on_completed: Optional[Callable[[], Any]] = None,
) -> AsyncEnumerable[T]:
    _require(on_next, "on_next")
    return _pipe(source, lambda seq: _DoEnumerator(seq, on_next, on_error, on_completed))


class _IgnoreEnumerator(_PipeEnumerator):
    operator = "ignore_elements"

    async def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        return None


def ignore_elements(source: Any) -> AsyncEnumerable[Any]:
    return _pipe(source, _IgnoreEnumerator)


class _SelectEnumerator(_PipeEnumerator):
    operator = "select"

    def __init__(self, source, selector) -> None:
        super().__init__(source)
        self._selector = selector

    async def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        return Outcome.of(await maybe_await(self._selector(value)))


def select(source: Any, selector: Callable[[T], Any]) -> AsyncEnumerable[Any]:
    _require(selector, "selector")
    return _pipe(source, lambda seq: _SelectEnumerator(seq, selector))


class _WhereEnumerator(_PipeEnumerator):
    operator = "where"

    def __init__(self, source, predicate) -> None:
        super().__init__(source)
        self._predicate = predicate

    async def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        return Outcome.of(value) if await maybe_await(self._predicate(value)) else None


def where(source: Any, predicate: Callable[[T], Any]) -> AsyncEnumerable[T]:
    _require(predicate, "predicate")
    return _pipe(source, lambda seq: _WhereEnumerator(seq, predicate))


class _ScanEnumerator(_PipeEnumerator):
    operator = "scan"

    def __init__(self, source, accumulator, seed) -> None:
        super().__init__(source)
        self._accumulator = accumulator
        self._acc = seed

    async def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        if self._acc is _NO_SEED:
            self._acc = value
            return None
        self._acc = await maybe_await(self._accumulator(self._acc, value))
        return Outcome.of(self._acc)


def scan(source: Any, accumulator: Callable[[Any, T], Any], *seed: Any) -> AsyncEnumerable[Any]:
    """Running aggregate; without a seed the first value only seeds it."""
    _require(accumulator, "accumulator")
    if len(seed) > 1:
        raise TypeError("scan() takes at most one seed")
    initial = seed[0] if seed else _NO_SEED
    return _pipe(source, lambda seq: _ScanEnumerator(seq, accumulator, initial))


class _DistinctUntilChangedEnumerator(_PipeEnumerator):
    operator = "distinct_until_changed"

    def __init__(self, source, key_selector) -> None:
        super().__init__(source)
        self._key_selector = key_selector
        self._last_key: Any = _NO_SEED

    async def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        key = value if self._key_selector is None else await maybe_await(self._key_selector(value))
        if self._last_key is not _NO_SEED and key == self._last_key:
            return None
        self._last_key = key
        return Outcome.of(value)


def distinct_until_changed(source: Any, key_selector: Optional[Callable[[T], Any]] = None) -> AsyncEnumerable[T]:
    return _pipe(source, lambda seq: _DistinctUntilChangedEnumerator(seq, key_selector))


class _BufferEnumerator(_PipeEnumerator):
    operator = "buffer"

    def __init__(self, source, count: int, skip: int) -> None:
        super().__init__(source)
        self._count = count
        self._skip = skip
        self._seen = 0
        self._open: Deque[List[Any]] = deque()

    async def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        if self._seen % self._skip == 0:
            self._open.append([])
        self._seen += 1
        for chunk in self._open:
            chunk.append(value)
        if self._open and len(self._open[0]) == self._count:
            return Outcome.of(self._open.popleft())
        return None

    async def _on_end(self, outcome: Outcome[Any]) -> Outcome[Any]:
        if outcome.is_completed and self._open:
            return Outcome.of(self._open.popleft())
        return outcome


def buffer(source: Any, count: int, skip: Optional[int] = None) -> AsyncEnumerable[List[T]]:
    """Chunks of ``count`` values, opened every ``skip`` values (default ``count``)."""
    if count is None or count <= 0:
        raise ArgumentOutOfRangeError("count", f"must be positive, got {count}")
    if skip is None:
        skip = count
    elif skip <= 0:
        raise ArgumentOutOfRangeError("skip", f"must be positive, got {skip}")
    return _pipe(source, lambda seq: _BufferEnumerator(seq, count, skip))


async def to_list(source: Any, token: _Token = None) -> List[Any]:
    """Drain ``source`` into a list; the enumerator is always disposed."""
    enumerator = as_async_enumerable(source).get_async_enumerator()
    try:
        items: List[Any] = []
        while await enumerator.move_next(token):
            items.append(enumerator.current)
        return items
    finally:
        enumerator.dispose()


async def for_each(source: Any, action: Callable[[Any], Any], token: _Token = None) -> None:
    """Run ``action`` for every value; the enumerator is always disposed."""
    seq = as_async_enumerable(source)
    _require(action, "action")
    enumerator = seq.get_async_enumerator()
    try:
        while await enumerator.move_next(token):
            await maybe_await(action(enumerator.current))
    finally:
        enumerator.dispose()


__all__ = [
    "concat",
    "start_with",
    "do",
    "ignore_elements",
    "select",
    "where",
    "scan",
    "distinct_until_changed",
    "buffer",
    "to_list",
    "for_each",
]
