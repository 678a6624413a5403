"""Error-recovery operators on the synchronous surface."""
from __future__ import annotations

import json

import pytest

from pullseq import enumerable as ex
from pullseq.base.errors import ArgumentNullError, ArgumentOutOfRangeError

from .utils import drain


def _then_fail(values, error):
    return ex.concat(ex.from_iterable(values), ex.throw(error))


def test_catch_switches_to_handler_sequence_once():
    seen = []

    def handler(error):
        seen.append(error)
        return [3]

    seq = _then_fail([1, 2], KeyError("k")).catch(handler, KeyError)
    assert seq.to_list() == [1, 2, 3]  # nosec B101 - pytest assert in tests
    assert len(seen) == 1 and isinstance(seen[0], KeyError)  # nosec B101 - pytest assert in tests


def test_catch_passes_through_non_matching_and_handler_faults():
    with pytest.raises(ValueError):
        ex.catch(_then_fail([1], ValueError("v")), lambda e: [0], KeyError).to_list()

    second = KeyError("second")
    values, error = drain(
        ex.catch(_then_fail([1], KeyError("first")), lambda e: _then_fail([2], second), KeyError).get_enumerator()
    )
    assert values == [1, 2] and error is second  # nosec B101


def test_catch_handler_failure_is_the_fault():
    def handler(_):
        raise RuntimeError("handler")

    values, error = drain(ex.catch(_then_fail([1], KeyError("k")), handler).get_enumerator())
    assert values == [1] and isinstance(error, RuntimeError)  # nosec B101


def test_catch_many_falls_through_to_last_fault():
    third = OSError("third")
    seq = ex.catch_many(
        _then_fail([0, 1], KeyError("first")),
        _then_fail([2, 3], ValueError("second")),
        ex.throw(third),
    )
    values, error = drain(seq.get_enumerator())
    assert values == [0, 1, 2, 3] and error is third  # nosec B101


def test_catch_many_stops_at_first_clean_completion():
    visited = []
    seq = ex.catch_many(
        [
            _then_fail([0], KeyError("first")),
            [1, 2],
            ex.defer(lambda: visited.append("third") or [9]),
        ]
    )
    assert seq.to_list() == [0, 1, 2]  # nosec B101
    assert visited == []  # nosec B101


def test_catch_with_fluent_form():
    assert ex.throw(KeyError("k")).catch_with([1], [2]).to_list() == [1]  # nosec B101


def test_multi_source_arguments_are_validated():
    with pytest.raises(ArgumentNullError):
        ex.catch_many()
    with pytest.raises(ArgumentNullError):
        ex.catch_many(None)
    with pytest.raises(ArgumentNullError):
        ex.on_error_resume_next([1], None)
    with pytest.raises(TypeError):
        ex.concat(5)


def test_retry_restarts_source_for_each_attempt():
    boom = ValueError("boom")
    values, error = drain(ex.retry(_then_fail([0, 1], boom), 2).get_enumerator())
    assert values == [0, 1, 0, 1] and error is boom  # nosec B101


def test_retry_edge_counts():
    assert ex.retry(_then_fail([0], KeyError("k")), 0).to_list() == []  # nosec B101
    with pytest.raises(KeyError):
        ex.retry(_then_fail([0], KeyError("k")), 1).to_list()
    with pytest.raises(ArgumentOutOfRangeError):
        ex.retry([1], -1)


def test_unbounded_retry_until_success():
    attempts = []

    def factory():
        attempts.append(1)
        if len(attempts) < 3:
            return _then_fail([len(attempts)], ValueError("transient"))
        return [99]

    assert ex.defer(factory).retry().to_list() == [1, 2, 99]  # nosec B101
    assert len(attempts) == 3  # nosec B101


def test_on_error_resume_next_swallows_faults():
    seq = ex.on_error_resume_next(
        _then_fail([0, 1], KeyError("first")),
        _then_fail([2, 3], ValueError("second")),
        ex.throw(OSError("third")),
    )
    values, error = drain(seq.get_enumerator())
    assert values == [0, 1, 2, 3] and error is None  # nosec B101
    assert ex.on_error_resume_next([[1], ex.throw(KeyError("k")), [2]]).to_list() == [1, 2]  # nosec B101
    assert ex.throw(KeyError("k")).on_error_resume_next([5]).to_list() == [5]  # nosec B101


def test_swallowed_faults_are_traced(tracing, capsys):
    ex.on_error_resume_next(ex.throw(KeyError("k")), [1]).to_list()
    records = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
    swallowed = [r for r in records if r.get("event") == "on_error_resume_next.swallowed"]
    assert len(swallowed) == 1  # nosec B101
    assert swallowed[0]["error_type"] == "KeyError" and swallowed[0]["attempt"] == 1  # nosec B101


def test_retry_attempts_are_traced(tracing, capsys):
    with pytest.raises(KeyError):
        ex.retry(ex.throw(KeyError("k")), 3).to_list()
    records = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
    attempts = [r["attempt"] for r in records if r.get("event") == "retry.attempt"]
    assert attempts == [2, 3]  # nosec B101


def test_finally_runs_once_on_completion_fault_and_dispose():
    calls = []
    ex.finally_([1, 2], lambda: calls.append("done")).to_list()
    assert calls == ["done"]  # nosec B101

    calls.clear()
    with pytest.raises(KeyError):
        ex.throw(KeyError("k")).finally_(lambda: calls.append("fault")).to_list()
    assert calls == ["fault"]  # nosec B101

    calls.clear()
    e = ex.repeat(1).finally_(lambda: calls.append("disposed")).get_enumerator()
    e.move_next()
    e.dispose()
    e.dispose()
    assert calls == ["disposed"]  # nosec B101


def test_finally_action_runs_on_dispose_before_first_advance():
    calls = []
    seq = ex.finally_([1], lambda: calls.append(1))
    e = seq.get_enumerator()
    assert calls == []  # nosec B101
    e.dispose()
    assert calls == [1]  # nosec B101
