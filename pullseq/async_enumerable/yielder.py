"""Yield capability for asynchronous ``create`` bodies.

The body runs as an ``asyncio`` task. ``await yielder.return_(value)``
publishes the value to the advancing driver and parks the body until the
next advance resumes it; the body may await anything else in between.
"""

from __future__ import annotations

import asyncio
from typing import Any, Generic, Optional, TypeVar

from ..base.outcome import Outcome

T = TypeVar("T")


class AsyncYielder(Generic[T]):
    """Hand-off point between a ``create`` body task and its driver.

    Two futures carry the exchange: ``_signal`` (body -> driver, the next
    outcome) and ``_resume`` (driver -> body, permission to continue).
    """

    def __init__(self) -> None:
        self._signal: Optional[asyncio.Future[Outcome[Any]]] = None
        self._resume: Optional[asyncio.Future[None]] = None

    def _expect(self) -> "asyncio.Future[Outcome[Any]]":
        """Arm a fresh signal future for the driver to await."""
        self._signal = asyncio.get_running_loop().create_future()
        return self._signal

    def _publish(self, outcome: Outcome[Any]) -> None:
        if self._signal is not None and not self._signal.done():
            self._signal.set_result(outcome)

    def _continue(self) -> bool:
        """Let a parked body run on; ``False`` if the body is not parked."""
        resume, self._resume = self._resume, None
        if resume is None or resume.done():
            return False
        resume.set_result(None)
        return True

    async def _park(self, outcome: Outcome[Any]) -> None:
        self._resume = asyncio.get_running_loop().create_future()
        self._publish(outcome)
        await self._resume

    async def return_(self, value: T) -> None:
        """Emit ``value`` and wait until the consumer advances again."""
        await self._park(Outcome.of(value))

    async def break_(self) -> None:
        """End the sequence; the body is cancelled and never resumed."""
        await self._park(Outcome.completed())


__all__ = ["AsyncYielder"]
