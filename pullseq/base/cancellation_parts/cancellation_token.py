"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` class handed to async advances and owned by
every enumerator as its lifetime token. Besides polling, callers can register
callbacks that fire once when cancellation is requested.
"""

from __future__ import annotations

from contextlib import suppress
from threading import Lock
from typing import Callable, List, Optional

from ..disposables_parts.action_disposable import ActionDisposable

CancellationCallback = Callable[[Optional[str]], None]


class CancellationToken:
    """A cooperative cancellation token with cascading children.

    Thread-safe for ``cancel``, ``register`` and ``link_child``. A linked
    child is cancelled, with the same reason, when its parent is.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        self._callbacks: List[CancellationCallback] = []

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cooperative cancellation, fire callbacks, cascade to children."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            self._reason = reason
            children, self._children = self._children, []
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(reason)
        for child in children:
            child.cancel(reason)

    def register(self, callback: CancellationCallback) -> ActionDisposable:
        """Invoke ``callback(reason)`` once when cancellation is requested.

        If the token is already cancelled the callback runs immediately on the
        calling thread. Disposing the returned registration unregisters the
        callback; it is safe to dispose after the callback has run.
        """
        with self._lock:
            fire_now = self._cancelled
            if not fire_now:
                self._callbacks.append(callback)
        if fire_now:
            callback(self._reason)
            return ActionDisposable(lambda: None)
        return ActionDisposable(lambda: self._unregister(callback))

    def _unregister(self, callback: CancellationCallback) -> None:
        with self._lock, suppress(ValueError):  # already fired
            self._callbacks.remove(callback)

    def link_child(self, token: "CancellationToken") -> ActionDisposable:
        """Cascade cancellation of this token to ``token``.

        A child linked after cancellation is cancelled immediately. Disposing
        the returned link detaches the child again.
        """
        with self._lock:
            should_cancel = self._cancelled
            if not should_cancel:
                self._children.append(token)
        if should_cancel:
            token.cancel(self._reason)
            return ActionDisposable(lambda: None)
        return ActionDisposable(lambda: self._unlink_child(token))

    def _unlink_child(self, token: "CancellationToken") -> None:
        with self._lock, suppress(ValueError):  # parent already cancelled
            self._children.remove(token)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._cancelled}, "
            f"reason={self._reason!r}, children={len(self._children)}, "
            f"callbacks={len(self._callbacks)})"
        )


__all__ = ["CancellationToken", "CancellationCallback"]
