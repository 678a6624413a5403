"""Run-once disposable wrapping a release callback."""

from __future__ import annotations

from threading import Lock
from typing import Callable


class ActionDisposable:
    """Invoke ``action`` on the first ``dispose`` call only.

    Thread-safe: concurrent ``dispose`` calls race on a lock-guarded flag and
    exactly one of them runs the action.
    """

    def __init__(self, action: Callable[[], None]) -> None:
        self._action: Callable[[], None] | None = action
        self._lock = Lock()

    @property
    def disposed(self) -> bool:  # noqa: D401 - short form
        """Whether the action has already been claimed."""
        return self._action is None

    def dispose(self) -> None:
        with self._lock:
            action, self._action = self._action, None
        if action is not None:
            action()


__all__ = ["ActionDisposable"]
