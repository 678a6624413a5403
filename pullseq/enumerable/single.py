"""Single- and multi-sequence helper operators (synchronous surface)."""

from __future__ import annotations

from collections import deque
from typing import Any, Callable, Deque, Iterable, List, Optional, TypeVar

from ..base.errors import ArgumentNullError, ArgumentOutOfRangeError
from ..base.outcome import Outcome
from .core import (
    AnonymousEnumerable,
    ChainEnumerator,
    Enumerable,
    ForwardingEnumerator,
    IterableEnumerable,
    as_enumerable,
    sources_argument,
)

T = TypeVar("T")
R = TypeVar("R")

_NO_SEED = object()


class _PipeEnumerator(ForwardingEnumerator[Any]):
    """Pulls from one source and maps each value through ``_on_value``.

    ``_on_value`` returns the outcome to surface, or ``None`` to skip the
    value and pull again.
    """

    def __init__(self, source: Enumerable[Any]) -> None:
        super().__init__()
        self._source = source

    def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        return Outcome.of(value)

    def _on_end(self, outcome: Outcome[Any]) -> Outcome[Any]:
        return outcome

    def _step(self) -> Outcome[Any]:
        if self._inner is None:
            self._switch(self._source.get_enumerator())
        while True:
            outcome = self._inner.advance()
            if not outcome.has_value:
                return self._on_end(outcome)
            mapped = self._on_value(outcome.value)
            if mapped is not None:
                return mapped


def _pipe(source: Iterable[Any], factory: Callable[[Enumerable[Any]], _PipeEnumerator]) -> Enumerable[Any]:
    seq = as_enumerable(source)
    return AnonymousEnumerable(lambda: factory(seq))


def _require(value: Any, argument: str) -> None:
    if value is None:
        raise ArgumentNullError(argument)


# concat / start_with -------------------------------------------------------


class _ConcatEnumerator(ChainEnumerator[T]):
    operator = "concat"


def concat(*sources: Any) -> Enumerable[T]:
    """Enumerate each source to the end, one after another; a fault stops the chain."""
    chain = sources_argument(sources)
    return AnonymousEnumerable(lambda: _ConcatEnumerator(chain))


def start_with(source: Iterable[T], *values: T) -> Enumerable[T]:
    seq = as_enumerable(source)
    prefix = IterableEnumerable(tuple(values))
    return AnonymousEnumerable(lambda: _ConcatEnumerator((prefix, seq)))


# taps ----------------------------------------------------------------------


class _DoEnumerator(_PipeEnumerator):
    operator = "do"

    def __init__(self, source, on_next, on_error, on_completed) -> None:
        super().__init__(source)
        self._on_next = on_next
        self._on_error = on_error
        self._on_completed = on_completed

    def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        self._on_next(value)
        return Outcome.of(value)

    def _on_end(self, outcome: Outcome[Any]) -> Outcome[Any]:
        if outcome.is_fault and self._on_error is not None:
            self._on_error(outcome.error)
        elif outcome.is_completed and self._on_completed is not None:
            self._on_completed()
        return outcome


def do(
    source: Iterable[T],
    on_next: Callable[[T], None],
    on_error: Optional[Callable[[BaseException], None]] = None,
    on_completed: Optional[Callable[[], None]] = None,
) -> Enumerable[T]:
    """Invoke side-effect callbacks as values, faults and completion pass through."""
    _require(on_next, "on_next")
    return _pipe(source, lambda seq: _DoEnumerator(seq, on_next, on_error, on_completed))


class _HideEnumerator(_PipeEnumerator):
    operator = "hide"


def hide(source: Iterable[T]) -> Enumerable[T]:
    """Wrap ``source`` so callers cannot recover its concrete type."""
    return _pipe(source, _HideEnumerator)


class _IgnoreEnumerator(_PipeEnumerator):
    operator = "ignore_elements"

    def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        return None


def ignore_elements(source: Iterable[Any]) -> Enumerable[Any]:
    return _pipe(source, _IgnoreEnumerator)


# projections ---------------------------------------------------------------


class _SelectEnumerator(_PipeEnumerator):
    operator = "select"

    def __init__(self, source, selector) -> None:
        super().__init__(source)
        self._selector = selector

    def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        return Outcome.of(self._selector(value))


def select(source: Iterable[T], selector: Callable[[T], R]) -> Enumerable[R]:
    _require(selector, "selector")
    return _pipe(source, lambda seq: _SelectEnumerator(seq, selector))


class _WhereEnumerator(_PipeEnumerator):
    operator = "where"

    def __init__(self, source, predicate) -> None:
        super().__init__(source)
        self._predicate = predicate

    def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        return Outcome.of(value) if self._predicate(value) else None


def where(source: Iterable[T], predicate: Callable[[T], bool]) -> Enumerable[T]:
    _require(predicate, "predicate")
    return _pipe(source, lambda seq: _WhereEnumerator(seq, predicate))


class _ScanEnumerator(_PipeEnumerator):
    operator = "scan"

    def __init__(self, source, accumulator, seed) -> None:
        super().__init__(source)
        self._accumulator = accumulator
        self._acc = seed

    def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        if self._acc is _NO_SEED:
            self._acc = value
            return None
        self._acc = self._accumulator(self._acc, value)
        return Outcome.of(self._acc)


def scan(source: Iterable[T], accumulator: Callable[[Any, T], Any], *seed: Any) -> Enumerable[Any]:
    """Running aggregate of ``source``.

    With a seed, every value produces an accumulation. Without one, the first
    value becomes the initial accumulator and is not itself produced.
    """
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

    def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        key = self._key_selector(value) if self._key_selector is not None else value
        if self._last_key is not _NO_SEED and key == self._last_key:
            return None
        self._last_key = key
        return Outcome.of(value)


def distinct_until_changed(
    source: Iterable[T], key_selector: Optional[Callable[[T], Any]] = None
) -> Enumerable[T]:
    """Drop values whose key equals the key of the value just before them."""
    return _pipe(source, lambda seq: _DistinctUntilChangedEnumerator(seq, key_selector))


class _BufferEnumerator(_PipeEnumerator):
    operator = "buffer"

    def __init__(self, source, count: int, skip: int) -> None:
        super().__init__(source)
        self._count = count
        self._skip = skip
        self._seen = 0
        self._open: Deque[List[Any]] = deque()

    def _on_value(self, value: Any) -> Optional[Outcome[Any]]:
        if self._seen % self._skip == 0:
            self._open.append([])
        self._seen += 1
        for chunk in self._open:
            chunk.append(value)
        if self._open and len(self._open[0]) == self._count:
            return Outcome.of(self._open.popleft())
        return None

    def _on_end(self, outcome: Outcome[Any]) -> Outcome[Any]:
        if outcome.is_completed and self._open:
            return Outcome.of(self._open.popleft())
        return outcome


def buffer(source: Iterable[T], count: int, skip: Optional[int] = None) -> Enumerable[List[T]]:
    """Chunks of ``count`` values, a new chunk starting every ``skip`` values.

    ``skip`` defaults to ``count`` (non-overlapping chunks). Chunks still open
    when the source ends are produced as they are.
    """
    if count is None or count <= 0:
        raise ArgumentOutOfRangeError("count", f"must be positive, got {count}")
    if skip is None:
        skip = count
    elif skip <= 0:
        raise ArgumentOutOfRangeError("skip", f"must be positive, got {skip}")
    return _pipe(source, lambda seq: _BufferEnumerator(seq, count, skip))


# terminal ------------------------------------------------------------------


def for_each(source: Iterable[T], action: Callable[..., None], *, with_index: bool = False) -> None:
    """Run ``action`` for every value; with ``with_index`` it also gets the position."""
    seq = as_enumerable(source)
    _require(action, "action")
    with seq.get_enumerator() as enumerator:
        index = 0
        while enumerator.move_next():
            if with_index:
                action(enumerator.current, index)
            else:
                action(enumerator.current)
            index += 1


def to_list(source: Iterable[T]) -> List[T]:
    seq = as_enumerable(source)
    with seq.get_enumerator() as enumerator:
        items: List[T] = []
        while enumerator.move_next():
            items.append(enumerator.current)
        return items


__all__ = [
    "concat",
    "start_with",
    "do",
    "hide",
    "ignore_elements",
    "select",
    "where",
    "scan",
    "distinct_until_changed",
    "buffer",
    "for_each",
    "to_list",
]
