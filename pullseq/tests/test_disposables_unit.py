"""Unit tests for the run-once release helpers."""
from __future__ import annotations

import threading

import pytest

from pullseq.base.disposables import (
    ActionDisposable,
    CompositeDisposable,
    is_releasable,
    release_resource,
)


def test_action_disposable_runs_once_across_threads():
    calls = []
    disposable = ActionDisposable(lambda: calls.append(1))
    threads = [threading.Thread(target=disposable.dispose) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert calls == [1]  # nosec B101 - pytest assert in tests
    assert disposable.disposed is True  # nosec B101 - pytest assert in tests


def test_composite_releases_in_order_and_reraises_first_error():
    order = []

    def fail():
        order.append("fail")
        raise KeyError("first")

    composite = CompositeDisposable(
        ActionDisposable(lambda: order.append("a")),
        ActionDisposable(fail),
        ActionDisposable(lambda: order.append("c")),
    )
    with pytest.raises(KeyError):
        composite.dispose()
    composite.dispose()
    assert order == ["a", "fail", "c"]  # nosec B101 - pytest assert in tests


def test_composite_add_after_dispose_releases_immediately():
    composite = CompositeDisposable()
    composite.dispose()
    calls = []
    composite.add(ActionDisposable(lambda: calls.append(1)))
    assert calls == [1]  # nosec B101 - pytest assert in tests


class _Closable:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class _Managed:
    def __init__(self):
        self.exited = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.exited = exc_info


def test_release_resource_protocols():
    closable = _Closable()
    managed = _Managed()
    release_resource(closable)
    release_resource(managed)
    release_resource(None)
    assert closable.closed is True  # nosec B101 - pytest assert in tests
    assert managed.exited == (None, None, None)  # nosec B101 - pytest assert in tests
    assert is_releasable(object()) is False  # nosec B101 - pytest assert in tests
    with pytest.raises(TypeError):
        release_resource(object())
