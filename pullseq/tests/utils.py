"""Shared testing utilities for the pullseq test suite.

Exports:
    - assert_true(condition: bool, message: str) -> None
    - drain(enumerator) -> (values, error)
    - adrain(enumerator, token=None) -> (values, error)
    - Resource: a releasable handle that counts its releases
"""
from __future__ import annotations

from typing import Any, List, Optional, Tuple


def assert_true(condition: bool, message: str) -> None:
    """Raise AssertionError with the provided message if condition is False."""
    if not condition:
        raise AssertionError(message)


def drain(enumerator: Any) -> Tuple[List[Any], Optional[BaseException]]:
    """Advance a sync enumerator to its end; keep the values seen before a fault."""
    values: List[Any] = []
    while True:
        outcome = enumerator.advance()
        if outcome.has_value:
            values.append(outcome.value)
            continue
        return values, outcome.error


async def adrain(enumerator: Any, token: Any = None) -> Tuple[List[Any], Optional[BaseException]]:
    """Async counterpart of :func:`drain`."""
    values: List[Any] = []
    while True:
        outcome = await enumerator.advance(token)
        if outcome.has_value:
            values.append(outcome.value)
            continue
        return values, outcome.error


class Resource:
    """Releasable handle used by ``using`` tests."""

    def __init__(self, name: str = "resource") -> None:
        self.name = name
        self.releases = 0

    @property
    def released(self) -> bool:
        return self.releases > 0

    def dispose(self) -> None:
        self.releases += 1
