"""Synchronous enumerator core.

``Enumerable`` is an immutable factory; every ``get_enumerator`` call returns
a fresh ``Enumerator``. Operators subclass ``Enumerator`` and implement
``_step`` which returns an :class:`~pullseq.base.outcome.Outcome`; the base
class turns raised exceptions into faults and applies the state machine.

Python iteration (``for x in seq``) runs through a generator that disposes
the enumerator when the loop ends, breaks, or raises.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple, TypeVar

from ..base.cursor import Cursor, EnumeratorState
from ..base.errors import ArgumentNullError, ObjectDisposedError
from ..base.outcome import Outcome

T = TypeVar("T")
R = TypeVar("R")


class Enumerator(Cursor[T], Iterator[T]):
    """Single-consumer cursor over an :class:`Enumerable`."""

    def _step(self) -> Outcome[T]:
        raise NotImplementedError

    def advance(self) -> Outcome[T]:
        """Produce the next outcome.

        Faults raised while producing are returned as ``Outcome.fault``;
        after a terminal outcome every call reports ``COMPLETED``.

        Raises:
            ObjectDisposedError: if the enumerator was disposed.
        """
        if self._state is EnumeratorState.DISPOSED:
            raise ObjectDisposedError()
        if self.finished:
            return Outcome.completed()
        try:
            outcome = self._step()
        except Exception as exc:
            outcome = Outcome.fault(exc)
        if self._state is EnumeratorState.DISPOSED:
            raise ObjectDisposedError("enumerator was disposed while advancing")
        return self._accept(outcome)

    def move_next(self) -> bool:
        """``advance`` in boolean form; a fault is raised the one time it is seen."""
        return self.advance().unwrap()

    def __next__(self) -> T:
        if self.move_next():
            return self.current
        raise StopIteration

    def __iter__(self) -> "Enumerator[T]":
        return self

    def __enter__(self) -> "Enumerator[T]":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.dispose()


class Enumerable(Iterable[T]):
    """Restartable lazy sequence.

    Besides ``get_enumerator`` the class carries fluent forms of the
    operators in :mod:`pullseq.enumerable`.
    """

    def get_enumerator(self) -> Enumerator[T]:
        raise NotImplementedError

    def __iter__(self) -> Iterator[T]:
        with self.get_enumerator() as enumerator:
            while enumerator.move_next():
                yield enumerator.current

    # fluent operators ----------------------------------------------------
    # Local imports: the operator modules import this one.

    def catch(self, handler: Callable[[Any], Iterable[T]], exception_type: type = Exception) -> "Enumerable[T]":
        from .exceptions import catch

        return catch(self, handler, exception_type)

    def catch_with(self, *others: Iterable[T]) -> "Enumerable[T]":
        from .exceptions import catch_many

        return catch_many([self, *others])

    def retry(self, count: Optional[int] = None) -> "Enumerable[T]":
        from .exceptions import retry

        return retry(self, count)

    def on_error_resume_next(self, other: Iterable[T], *others: Iterable[T]) -> "Enumerable[T]":
        from .exceptions import on_error_resume_next

        return on_error_resume_next(self, other, *others)

    def finally_(self, action: Callable[[], None]) -> "Enumerable[T]":
        from .exceptions import finally_

        return finally_(self, action)

    def repeat(self, count: Optional[int] = None) -> "Enumerable[T]":
        from .creation import repeat_sequence

        return repeat_sequence(self, count)

    def concat(self, *others: Iterable[T]) -> "Enumerable[T]":
        from .single import concat

        return concat([self, *others])

    def do(
        self,
        on_next: Callable[[T], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        on_completed: Optional[Callable[[], None]] = None,
    ) -> "Enumerable[T]":
        from .single import do

        return do(self, on_next, on_error, on_completed)

    def hide(self) -> "Enumerable[T]":
        from .single import hide

        return hide(self)

    def start_with(self, *values: T) -> "Enumerable[T]":
        from .single import start_with

        return start_with(self, *values)

    def ignore_elements(self) -> "Enumerable[T]":
        from .single import ignore_elements

        return ignore_elements(self)

    def scan(self, accumulator: Callable[[Any, T], Any], *seed: Any) -> "Enumerable[Any]":
        from .single import scan

        return scan(self, accumulator, *seed)

    def distinct_until_changed(self, key_selector: Optional[Callable[[T], Any]] = None) -> "Enumerable[T]":
        from .single import distinct_until_changed

        return distinct_until_changed(self, key_selector)

    def buffer(self, count: int, skip: Optional[int] = None) -> "Enumerable[List[T]]":
        from .single import buffer

        return buffer(self, count, skip)

    def select(self, selector: Callable[[T], R]) -> "Enumerable[R]":
        from .single import select

        return select(self, selector)

    def where(self, predicate: Callable[[T], bool]) -> "Enumerable[T]":
        from .single import where

        return where(self, predicate)

    def for_each(self, action: Callable[..., None], *, with_index: bool = False) -> None:
        from .single import for_each

        for_each(self, action, with_index=with_index)

    def to_list(self) -> List[T]:
        from .single import to_list

        return to_list(self)


class AnonymousEnumerable(Enumerable[T]):
    """Sequence backed by an enumerator factory."""

    def __init__(self, get_enumerator: Callable[[], Enumerator[T]]) -> None:
        self._factory = get_enumerator

    def get_enumerator(self) -> Enumerator[T]:
        return self._factory()


class AnonymousEnumerator(Enumerator[T]):
    """Enumerator assembled from ``move_next`` / ``current`` / ``dispose`` callables."""

    operator = "create_enumerator"

    def __init__(
        self,
        move_next: Callable[[], bool],
        current: Optional[Callable[[], T]] = None,
        dispose: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__()
        self._move_next = move_next
        self._read_current = current
        self._dispose_action = dispose

    def _step(self) -> Outcome[T]:
        if not self._move_next():
            return Outcome.completed()
        return Outcome.of(self._read_current() if self._read_current is not None else None)

    def _release(self) -> None:
        if self._dispose_action is not None:
            self._dispose_action()


class IterableEnumerable(Enumerable[T]):
    """Adapter turning a plain Python iterable into an :class:`Enumerable`."""

    def __init__(self, iterable: Iterable[T]) -> None:
        self._iterable = iterable

    def get_enumerator(self) -> Enumerator[T]:
        return _IteratorEnumerator(self._iterable)


class _IteratorEnumerator(Enumerator[T]):
    operator = "from_iterable"

    def __init__(self, iterable: Iterable[T]) -> None:
        super().__init__()
        self._iterable = iterable
        self._iterator: Optional[Iterator[T]] = None

    def _step(self) -> Outcome[T]:
        if self._iterator is None:
            self._iterator = iter(self._iterable)
        try:
            return Outcome.of(next(self._iterator))
        except StopIteration:
            return Outcome.completed()

    def _release(self) -> None:
        close = getattr(self._iterator, "close", None)
        if callable(close):
            close()


class ForwardingEnumerator(Enumerator[T]):
    """Enumerator that owns at most one inner enumerator at a time.

    ``_release`` disposes the inner enumerator; ``_switch`` replaces it,
    disposing the previous one first.
    """

    def __init__(self) -> None:
        super().__init__()
        self._inner: Optional[Enumerator[Any]] = None

    def _switch(self, inner: Optional[Enumerator[Any]]) -> None:
        previous, self._inner = self._inner, inner
        if previous is not None:
            previous.dispose()

    def _release(self) -> None:
        self._switch(None)


class ChainEnumerator(ForwardingEnumerator[T]):
    """Enumerates a sequence of sequences one after another.

    Subclasses decide what an inner completion or fault means via
    ``_on_inner_completed`` and ``_on_inner_fault``; ``_on_exhausted``
    produces the final outcome once no sources remain.
    """

    def __init__(self, sources: Iterable[Any]) -> None:
        super().__init__()
        self._sources = sources
        self._pending: Optional[Iterator[Any]] = None
        self._attempt = 0

    def _on_attempt(self, attempt: int) -> None:
        """Called before each inner sequence is acquired."""

    def _on_inner_completed(self) -> bool:
        """Return ``True`` to end the chain after an inner sequence completes."""
        return False

    def _on_inner_fault(self, error: BaseException) -> Optional[Outcome[T]]:
        """Return an outcome to surface, or ``None`` to move to the next source."""
        return Outcome.fault(error)

    def _on_exhausted(self) -> Outcome[T]:
        return Outcome.completed()

    def _acquire_next(self) -> bool:
        if self._pending is None:
            self._pending = iter(self._sources)
        for source in self._pending:
            self._attempt += 1
            self._on_attempt(self._attempt)
            self._switch(as_enumerable(source, "sources[]").get_enumerator())
            return True
        return False

    def _step(self) -> Outcome[T]:
        while True:
            if self._inner is None:
                try:
                    acquired = self._acquire_next()
                except Exception as exc:
                    handled = self._on_inner_fault(exc)
                    if handled is not None:
                        return handled
                    continue
                if not acquired:
                    return self._on_exhausted()
            outcome = self._inner.advance()
            if outcome.has_value:
                return outcome
            self._switch(None)
            if outcome.is_completed:
                if self._on_inner_completed():
                    return outcome
                continue
            handled = self._on_inner_fault(outcome.error)
            if handled is not None:
                return handled


def as_enumerable(source: Any, argument: str = "source") -> Enumerable[Any]:
    """Return ``source`` as an :class:`Enumerable`.

    Raises:
        ArgumentNullError: if ``source`` is ``None``.
        TypeError: if ``source`` is not iterable.
    """
    if source is None:
        raise ArgumentNullError(argument)
    if isinstance(source, Enumerable):
        return source
    if isinstance(source, Iterable):
        return IterableEnumerable(source)
    raise TypeError(f"{argument} must be iterable, got {type(source).__name__}")


def sources_argument(sources: Tuple[Any, ...]) -> Iterable[Any]:
    """Normalize the ``*sources`` of a multi-sequence operator.

    A single argument is an iterable *of* sequences and is iterated afresh
    on every enumeration; two or more arguments are the sequences
    themselves.

    Raises:
        ArgumentNullError: if no sources were given or any of them is ``None``.
    """
    if not sources:
        raise ArgumentNullError("sources", "at least one sequence is required")
    if len(sources) == 1:
        (outer,) = sources
        if outer is None:
            raise ArgumentNullError("sources")
        if not isinstance(outer, Iterable):
            raise TypeError(f"sources must be an iterable of sequences, got {type(outer).__name__}")
        return outer
    return tuple(as_enumerable(source, f"sources[{i}]") for i, source in enumerate(sources))


def from_iterable(iterable: Iterable[T]) -> Enumerable[T]:
    """Wrap ``iterable``; each enumeration calls ``iter`` on it afresh."""
    if iterable is None:
        raise ArgumentNullError("iterable")
    return IterableEnumerable(iterable)


__all__ = [
    "Enumerator",
    "Enumerable",
    "AnonymousEnumerable",
    "AnonymousEnumerator",
    "IterableEnumerable",
    "ForwardingEnumerator",
    "ChainEnumerator",
    "as_enumerable",
    "sources_argument",
    "from_iterable",
]
