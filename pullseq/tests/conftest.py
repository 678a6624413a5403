"""Pytest configuration for the pullseq test suite.

Every test starts from a clean runtime configuration: ``PULLSEQ_*``
variables are removed and the cached ``RuntimeConfig`` dropped, so a test
that enables tracing cannot leak it into the next one.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from pullseq.config import reset_runtime_config
from pullseq.config.defaults import ENV_VARS


@pytest.fixture(autouse=True)
def clean_runtime_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear ``PULLSEQ_*`` env vars and the config cache around each test."""

    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_runtime_config()
    yield
    reset_runtime_config()


@pytest.fixture()
def tracing(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Enable JSON trace events for the duration of a test."""

    monkeypatch.setenv("PULLSEQ_TRACE_EVENTS", "1")
    monkeypatch.setenv("PULLSEQ_LOG_JSON", "1")
    reset_runtime_config()
    yield


@pytest.fixture()
def fast_cancel_grace(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Shorten the unwind grace of cancelled async steps."""

    monkeypatch.setenv("PULLSEQ_CANCEL_GRACE_SECONDS", "0.05")
    reset_runtime_config()
    yield
