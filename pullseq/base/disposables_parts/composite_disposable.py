"""Group of disposables released together, in insertion order."""

from __future__ import annotations

from threading import Lock
from typing import Any, List

from .release import release_resource


class CompositeDisposable:
    """Owns a list of disposables and releases all of them exactly once.

    Items added after the composite was disposed are released immediately.
    Every item is released even if an earlier one raises; the first error is
    re-raised once all items have been visited.
    """

    def __init__(self, *items: Any) -> None:
        self._items: List[Any] = [i for i in items if i is not None]
        self._disposed = False
        self._lock = Lock()

    @property
    def disposed(self) -> bool:  # noqa: D401 - short form
        """Whether ``dispose`` has been called."""
        return self._disposed

    def add(self, item: Any) -> None:
        """Take ownership of ``item`` (released now if already disposed)."""
        if item is None:
            return
        with self._lock:
            if not self._disposed:
                self._items.append(item)
                return
        release_resource(item)

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            items, self._items = self._items, []
        first_error: Exception | None = None
        for item in items:
            try:
                release_resource(item)
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def __len__(self) -> int:  # pragma: no cover - introspection aid
        return len(self._items)


__all__ = ["CompositeDisposable"]
