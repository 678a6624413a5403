"""Disposables parts package (see ``pullseq.base.disposables``)."""

from .action_disposable import ActionDisposable
from .composite_disposable import CompositeDisposable
from .release import Disposable, is_releasable, release_resource

__all__ = [
    "ActionDisposable",
    "CompositeDisposable",
    "Disposable",
    "is_releasable",
    "release_resource",
]
