"""Enumerator state machine shared by the sync and async surfaces.

``Cursor`` owns everything both flavours agree on: the five-state lifecycle,
the ``current`` guard, run-once release of owned resources, and the rule that
a release failure replaces the outcome it interrupted. Surfaces add only the
way a step is driven (``Enumerator.advance`` vs ``AsyncEnumerator.advance``).

Lifecycle::

    NOT_STARTED -> ACTIVE <-> ACTIVE -> COMPLETED
    NOT_STARTED | ACTIVE -> FAULTED
    any -> DISPOSED            (absorbing)
"""

from __future__ import annotations

import itertools
from enum import Enum
from threading import Lock
from typing import Any, Generic, Optional, TypeVar

from .errors import InvalidOperationError, NotSupportedError
from .log_support import LogContext
from .logging import trace_event
from .outcome import Outcome

T = TypeVar("T")

_IDS = itertools.count(1)


class EnumeratorState(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAULTED = "faulted"
    DISPOSED = "disposed"


_TERMINAL = (EnumeratorState.COMPLETED, EnumeratorState.FAULTED)


class BodyState(str, Enum):
    """Progress of a ``create`` body: where the driver will resume it."""

    NOT_STARTED = "not_started"
    SUSPENDED = "suspended"
    COMPLETED = "completed"


class Cursor(Generic[T]):
    """Common base of :class:`~pullseq.enumerable.Enumerator` and
    :class:`~pullseq.async_enumerable.AsyncEnumerator`.

    Subclasses override :meth:`_release` to free what they own (inner
    enumerators, resource handles, body coroutines) and optionally
    :meth:`_on_dispose` to wake a blocked step.
    """

    operator: str = "enumerator"
    surface: str = "sync"

    def __init__(self) -> None:
        self._state = EnumeratorState.NOT_STARTED
        self._current: Optional[T] = None
        self._has_current = False
        self._released = False
        self._lock = Lock()
        self._id = next(_IDS)

    # state ---------------------------------------------------------------
    @property
    def state(self) -> EnumeratorState:  # noqa: D401 - short property
        """Current lifecycle state."""
        return self._state

    @property
    def disposed(self) -> bool:  # noqa: D401 - short property
        return self._state is EnumeratorState.DISPOSED

    @property
    def finished(self) -> bool:
        """Whether the enumerator reached ``COMPLETED`` or ``FAULTED``."""
        return self._state in _TERMINAL

    @property
    def current(self) -> T:
        """Element produced by the last successful advance.

        Raises:
            InvalidOperationError: before the first value, after the end of
                the sequence, after a fault, or after dispose.
        """
        if not self._has_current or self._state is not EnumeratorState.ACTIVE:
            raise InvalidOperationError("current is only valid after an advance that produced a value")
        return self._current  # type: ignore[return-value]

    def reset(self) -> None:
        raise NotSupportedError("enumerators cannot be restarted in place; acquire a new one")

    # release -------------------------------------------------------------
    def _release(self) -> None:
        """Free owned resources. Called at most once."""

    def _on_dispose(self) -> None:
        """Hook run by ``dispose`` before resources are released."""

    def _release_once(self) -> Optional[Exception]:
        with self._lock:
            if self._released:
                return None
            self._released = True
        try:
            self._release()
        except Exception as exc:
            trace_event("enumerator.release_failed", self._log_context(), error=exc)
            return exc
        return None

    def _accept(self, outcome: Outcome[T]) -> Outcome[T]:
        """Apply the result of a step to the state machine."""
        if outcome.has_value:
            if self._state is EnumeratorState.DISPOSED:
                return outcome
            self._current = outcome.value
            self._has_current = True
            self._state = EnumeratorState.ACTIVE
            return outcome
        return self._finish(outcome)

    def _finish(self, outcome: Outcome[T]) -> Outcome[T]:
        self._current = None
        self._has_current = False
        error = self._release_once()
        if error is not None:
            if outcome.is_fault and error is not outcome.error and error.__context__ is None:
                error.__context__ = outcome.error
            outcome = Outcome.fault(error)
        if self._state is not EnumeratorState.DISPOSED:
            self._state = EnumeratorState.FAULTED if outcome.is_fault else EnumeratorState.COMPLETED
        return outcome

    def dispose(self) -> None:
        """Release owned resources. Idempotent; later calls do nothing.

        A failure raised by the release logic propagates from the first call.
        """
        with self._lock:
            if self._state is EnumeratorState.DISPOSED:
                return
            self._state = EnumeratorState.DISPOSED
            self._current = None
            self._has_current = False
        self._on_dispose()
        error = self._release_once()
        if error is not None:
            raise error

    # diagnostics ---------------------------------------------------------
    def _log_context(self, **extra: Any) -> LogContext:
        return LogContext(
            operator=self.operator,
            surface=self.surface,
            enumerator_id=f"{self.operator}#{self._id}",
            extra=extra,
        )

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"<{type(self).__name__} {self.operator}#{self._id} state={self._state.value}>"


__all__ = ["BodyState", "Cursor", "EnumeratorState"]
