"""Cancellation parts package (see ``pullseq.base.cancellation``)."""

from .cancelled_error import CancelledError
from .cancellation_token import CancellationCallback, CancellationToken

__all__ = ["CancellationToken", "CancellationCallback", "CancelledError"]
