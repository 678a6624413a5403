"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose stable cancellation constructs via the canonical
``pullseq.base.cancellation`` import path while the concrete implementations
live under ``cancellation_parts`` for organization.

Notes
-----
- ``CancellationToken`` is advisory: async enumerators check it at their
  single suspension point (the advance) and translate a signalled token into
  a ``CancelledError`` fault after releasing what they own.
- Every enumerator also owns a private lifetime token cancelled by
  ``dispose()``, which is how a disposal wakes an in-flight advance.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationCallback, CancellationToken

__all__ = ["CancellationToken", "CancellationCallback", "CancelledError"]
