"""Yield capability for synchronous ``create`` bodies.

A ``create`` body is an ``async def`` taking a :class:`Yielder`. Awaiting
``yielder.return_(value)`` or ``yielder.break_()`` suspends the coroutine and
hands a :class:`YieldSignal` to the driving enumerator, which decides when
(and whether) to resume it. No event loop is involved: the enumerator drives
the coroutine with ``send`` directly, so the body may not await anything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generator, Generic, Optional, TypeVar

T = TypeVar("T")


class SignalKind(str, Enum):
    RETURN = "return"
    BREAK = "break"


@dataclass(frozen=True)
class YieldSignal:
    """Value a suspended body hands to its driver."""

    yielder: "Yielder[Any]"
    kind: SignalKind
    value: Any = None


class _SignalAwaitable:
    __slots__ = ("_signal",)

    def __init__(self, signal: YieldSignal) -> None:
        self._signal = signal

    def __await__(self) -> Generator[YieldSignal, None, None]:
        yield self._signal


class Yielder(Generic[T]):
    """Capability passed to a ``create`` body."""

    def return_(self, value: T) -> _SignalAwaitable:
        """Emit ``value`` and suspend until the consumer advances again."""
        return _SignalAwaitable(YieldSignal(self, SignalKind.RETURN, value))

    def break_(self) -> _SignalAwaitable:
        """End the sequence; the body is closed and never resumed."""
        return _SignalAwaitable(YieldSignal(self, SignalKind.BREAK))

    def owns(self, signal: Optional[object]) -> bool:
        return isinstance(signal, YieldSignal) and signal.yielder is self


__all__ = ["Yielder", "YieldSignal", "SignalKind"]
