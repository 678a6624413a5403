"""Tagged result of a single advance.

An advance either produces a value, reports end-of-sequence, or reports a
fault. Combinators inspect the tag instead of catching exceptions, so a fault
is observed exactly once, by whichever party is currently driving the
enumeration, and end-of-sequence can never be confused with a failure.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class OutcomeKind(str, Enum):
    """Tag of an :class:`Outcome`."""

    VALUE = "value"
    COMPLETED = "completed"
    FAULTED = "faulted"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Immutable advance result.

    Attributes:
        kind: Which of the three signals this is.
        value: The produced element (``VALUE`` only).
        error: The fault (``FAULTED`` only).
    """

    kind: OutcomeKind
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def of(cls, value: T) -> "Outcome[T]":
        return cls(OutcomeKind.VALUE, value=value)

    @classmethod
    def completed(cls) -> "Outcome[Any]":
        return _COMPLETED

    @classmethod
    def fault(cls, error: BaseException) -> "Outcome[Any]":
        return cls(OutcomeKind.FAULTED, error=error)

    @property
    def has_value(self) -> bool:
        return self.kind is OutcomeKind.VALUE

    @property
    def is_completed(self) -> bool:
        return self.kind is OutcomeKind.COMPLETED

    @property
    def is_fault(self) -> bool:
        return self.kind is OutcomeKind.FAULTED

    @property
    def is_terminal(self) -> bool:
        """``True`` for ``COMPLETED`` and ``FAULTED``."""
        return self.kind is not OutcomeKind.VALUE

    def unwrap(self) -> bool:
        """Translate to the ``move_next`` convention: raise on fault, else has-value."""
        if self.kind is OutcomeKind.FAULTED:
            assert self.error is not None  # nosec B101 - constructor invariant
            raise self.error
        return self.kind is OutcomeKind.VALUE

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        if self.kind is OutcomeKind.VALUE:
            return f"Outcome.of({self.value!r})"
        if self.kind is OutcomeKind.FAULTED:
            return f"Outcome.fault({self.error!r})"
        return "Outcome.completed()"


_COMPLETED: Outcome[Any] = Outcome(OutcomeKind.COMPLETED)


__all__ = ["Outcome", "OutcomeKind"]
