"""Enumerator state machine: lifecycle, ``current`` guard, release rules.

Exercised through small hand-written enumerators and the anonymous
enumerator so that the base class behavior is isolated from operators.
"""
from __future__ import annotations

import pytest

from pullseq import enumerable as ex
from pullseq.base.cursor import EnumeratorState
from pullseq.base.errors import InvalidOperationError, NotSupportedError, ObjectDisposedError
from pullseq.base.outcome import Outcome, OutcomeKind
from pullseq.enumerable import Enumerator


class _Counting(Enumerator[int]):
    operator = "counting"

    def __init__(self, limit: int, release_error: Exception | None = None, fault: Exception | None = None):
        super().__init__()
        self._n = 0
        self._limit = limit
        self._release_error = release_error
        self._fault = fault
        self.releases = 0

    def _step(self) -> Outcome[int]:
        if self._n == self._limit:
            if self._fault is not None:
                raise self._fault
            return Outcome.completed()
        self._n += 1
        return Outcome.of(self._n)

    def _release(self) -> None:
        self.releases += 1
        if self._release_error is not None:
            raise self._release_error


def test_outcome_tags_and_unwrap():
    assert Outcome.of(1).has_value and Outcome.of(1).unwrap() is True  # nosec B101
    assert Outcome.completed() is Outcome.completed()  # nosec B101
    assert Outcome.completed().unwrap() is False and Outcome.completed().is_terminal  # nosec B101
    fault = Outcome.fault(KeyError("k"))
    assert fault.kind is OutcomeKind.FAULTED and fault.is_terminal  # nosec B101
    with pytest.raises(KeyError):
        fault.unwrap()


def test_current_is_only_valid_after_a_value():
    e = _Counting(1)
    assert e.state is EnumeratorState.NOT_STARTED  # nosec B101
    with pytest.raises(InvalidOperationError):
        _ = e.current
    assert e.move_next() is True and e.current == 1  # nosec B101
    assert e.state is EnumeratorState.ACTIVE  # nosec B101
    assert e.move_next() is False and e.state is EnumeratorState.COMPLETED  # nosec B101
    with pytest.raises(InvalidOperationError):
        _ = e.current


def test_terminal_state_keeps_reporting_completed():
    e = _Counting(0, fault=ValueError("boom"))
    first = e.advance()
    assert first.is_fault and isinstance(first.error, ValueError)  # nosec B101
    assert e.state is EnumeratorState.FAULTED  # nosec B101
    # the fault is observed exactly once
    assert e.advance().is_completed and e.advance().is_completed  # nosec B101
    with pytest.raises(InvalidOperationError):
        _ = e.current


def test_release_runs_once_on_completion_and_dispose():
    e = _Counting(2)
    assert list(e) == [1, 2]  # nosec B101
    assert e.releases == 1  # nosec B101
    e.dispose()
    e.dispose()
    assert e.releases == 1 and e.state is EnumeratorState.DISPOSED  # nosec B101


def test_dispose_is_idempotent_and_blocks_further_use():
    e = _Counting(5)
    e.move_next()
    e.dispose()
    e.dispose()
    assert e.releases == 1  # nosec B101
    with pytest.raises(ObjectDisposedError):
        e.advance()
    with pytest.raises(ObjectDisposedError):
        e.move_next()
    with pytest.raises(InvalidOperationError):
        _ = e.current


def test_release_failure_becomes_the_fault_with_context():
    original = ValueError("original")
    cleanup = RuntimeError("cleanup")
    e = _Counting(0, release_error=cleanup, fault=original)
    outcome = e.advance()
    assert outcome.error is cleanup  # nosec B101
    assert cleanup.__context__ is original  # nosec B101
    assert e.state is EnumeratorState.FAULTED  # nosec B101


def test_release_failure_on_dispose_propagates_once():
    cleanup = RuntimeError("cleanup")
    e = _Counting(3, release_error=cleanup)
    e.move_next()
    with pytest.raises(RuntimeError):
        e.dispose()
    e.dispose()
    assert e.releases == 1  # nosec B101


def test_reset_is_not_supported():
    with pytest.raises(NotSupportedError):
        _Counting(1).reset()


def test_context_manager_and_for_loop_break_dispose():
    with _Counting(5) as e:
        e.move_next()
    assert e.state is EnumeratorState.DISPOSED and e.releases == 1  # nosec B101

    released = []
    seq = ex.create_enumerable(lambda: ex.create_enumerator(lambda: True, lambda: 7, lambda: released.append(1)))
    for value in seq:
        assert value == 7  # nosec B101
        break
    assert released == [1]  # nosec B101


def test_create_enumerator_dispose_runs_at_most_once():
    calls = []
    items = iter([1, 2])
    current = []

    def move_next():
        for item in items:
            current[:] = [item]
            return True
        return False

    e = ex.create_enumerator(move_next, lambda: current[0], lambda: calls.append("dispose"))
    assert e.move_next() and e.current == 1  # nosec B101
    assert e.move_next() and e.current == 2  # nosec B101
    assert e.move_next() is False  # nosec B101
    e.dispose()
    assert calls == ["dispose"]  # nosec B101


def test_from_iterable_reiterates_and_closes_generators():
    closed = []

    def gen():
        try:
            yield 1
            yield 2
        finally:
            closed.append(True)

    seq = ex.from_iterable([1, 2, 3])
    assert seq.to_list() == [1, 2, 3] and seq.to_list() == [1, 2, 3]  # nosec B101
    e = ex.from_iterable(gen()).get_enumerator()
    e.move_next()
    e.dispose()
    assert closed == [True]  # nosec B101
