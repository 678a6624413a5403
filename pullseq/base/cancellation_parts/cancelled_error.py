"""``CancelledError``: the fault an advance reports after a cancellation request."""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Cooperative cancellation observed while advancing an enumerator.

    Not ``asyncio.CancelledError``. It is an ordinary ``Exception`` that
    arrives as a fault outcome, so ``catch`` on the synchronous surface can
    match it like any other error.
    """


__all__ = ["CancelledError"]
