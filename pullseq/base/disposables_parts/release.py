"""Uniform release of resource handles.

Resource handles produced by ``using`` factories are opaque: any object with
``dispose()``, ``close()`` or the context-manager ``__exit__`` is accepted.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Disposable(Protocol):  # pragma: no cover - structural protocol
    def dispose(self) -> None: ...


def is_releasable(resource: Any) -> bool:
    """Return whether ``release_resource`` knows how to release ``resource``."""
    return (
        isinstance(resource, Disposable)
        or callable(getattr(resource, "close", None))
        or callable(getattr(resource, "__exit__", None))
    )


def release_resource(resource: Any) -> None:
    """Release ``resource`` using the first protocol it supports.

    ``None`` is ignored. Objects supporting none of the protocols raise
    ``TypeError`` so that a leaked handle is never silent.
    """
    if resource is None:
        return
    if isinstance(resource, Disposable):
        resource.dispose()
        return
    close = getattr(resource, "close", None)
    if callable(close):
        close()
        return
    exit_ = getattr(resource, "__exit__", None)
    if callable(exit_):
        exit_(None, None, None)
        return
    raise TypeError(f"cannot release resource of type {type(resource).__name__}")


__all__ = ["Disposable", "is_releasable", "release_resource"]
