"""Scoped-ownership release helpers (public API facade).

Purpose
-------
Expose the disposable building blocks used by enumerators to own inner
enumerators, ``using`` resources and ``finally_`` actions. Every helper here
releases its target exactly once, no matter how many times or from how many
threads ``dispose`` is invoked.
"""

from .disposables_parts.action_disposable import ActionDisposable
from .disposables_parts.composite_disposable import CompositeDisposable
from .disposables_parts.release import Disposable, is_releasable, release_resource

__all__ = [
    "ActionDisposable",
    "CompositeDisposable",
    "Disposable",
    "is_releasable",
    "release_resource",
]
