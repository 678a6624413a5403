"""Creation operators on the synchronous surface."""
from __future__ import annotations

import asyncio
import threading

import pytest

from pullseq import enumerable as ex
from pullseq.base.cursor import BodyState, EnumeratorState
from pullseq.base.errors import (
    ArgumentNullError,
    ArgumentOutOfRangeError,
    InvalidOperationError,
    NotSupportedError,
    ObjectDisposedError,
)

from .utils import Resource, drain


def test_simple_factories():
    assert ex.return_(42).to_list() == [42]  # nosec B101 - pytest assert in tests
    assert ex.empty().to_list() == []  # nosec B101 - pytest assert in tests
    assert ex.range_(3, 4).to_list() == [3, 4, 5, 6]  # nosec B101 - pytest assert in tests
    assert ex.range_(3, 0).to_list() == []  # nosec B101 - pytest assert in tests
    assert ex.repeat("x", 3).to_list() == ["x", "x", "x"]  # nosec B101 - pytest assert in tests
    assert ex.repeat_sequence([1, 2], 2).to_list() == [1, 2, 1, 2]  # nosec B101 - pytest assert in tests


def test_infinite_repeat_is_lazy():
    e = ex.repeat(1).get_enumerator()
    assert [next(e) for _ in range(5)] == [1] * 5  # nosec B101
    e.dispose()


def test_argument_validation_is_eager():
    with pytest.raises(ArgumentOutOfRangeError):
        ex.range_(0, -1)
    with pytest.raises(ArgumentOutOfRangeError):
        ex.repeat(1, -1)
    with pytest.raises(ArgumentNullError):
        ex.throw(None)
    with pytest.raises(ArgumentNullError):
        ex.defer(None)
    with pytest.raises(ArgumentNullError):
        ex.generate(0, None, lambda x: x, lambda x: x)
    with pytest.raises(ArgumentNullError):
        ex.using(None, lambda r: [])
    with pytest.raises(ArgumentNullError):
        ex.create(None)
    with pytest.raises(ArgumentNullError):
        ex.repeat_sequence(None)


def test_throw_faults_on_first_advance():
    err = KeyError("k")
    e = ex.throw(err).get_enumerator()
    outcome = e.advance()
    assert outcome.error is err and e.state is EnumeratorState.FAULTED  # nosec B101


def test_defer_runs_factory_per_enumeration():
    state = {"x": 0, "calls": 0}

    def factory():
        state["calls"] += 1
        return ex.return_(state["x"])

    seq = ex.defer(factory)
    assert state["calls"] == 0  # nosec B101
    assert seq.to_list() == [0]  # nosec B101
    state["x"] += 1
    assert seq.to_list() == [1]  # nosec B101
    assert state["calls"] == 2  # nosec B101


def test_defer_factory_failure_faults_that_enumeration_only():
    attempts = []

    def factory():
        attempts.append(1)
        if len(attempts) == 1:
            raise LookupError("first")
        return [1]

    seq = ex.defer(factory)
    with pytest.raises(LookupError):
        seq.to_list()
    assert seq.to_list() == [1]  # nosec B101


def test_generate_squares():
    seq = ex.generate(0, lambda x: x < 5, lambda x: x + 1, lambda x: x * x)
    assert seq.to_list() == [0, 1, 4, 9, 16]  # nosec B101
    assert seq.to_list() == [0, 1, 4, 9, 16]  # nosec B101


def test_generate_condition_fault_before_first_value():
    def condition(_):
        raise ValueError("condition")

    values, error = drain(ex.generate(0, condition, lambda x: x + 1, lambda x: x).get_enumerator())
    assert values == [] and isinstance(error, ValueError)  # nosec B101


def test_generate_iterate_or_select_fault_keeps_earlier_values():
    def iterate(x):
        if x == 2:
            raise ArithmeticError("iterate")
        return x + 1

    def select(x):
        if x == 1:
            raise TypeError("select")
        return x

    values, error = drain(ex.generate(0, lambda x: True, iterate, lambda x: x).get_enumerator())
    assert values == [0, 1, 2] and isinstance(error, ArithmeticError)  # nosec B101
    values, error = drain(ex.generate(0, lambda x: True, lambda x: x + 1, select).get_enumerator())
    assert values == [0] and isinstance(error, TypeError)  # nosec B101


def test_using_scopes_resource_to_each_enumeration():
    created = []

    def factory():
        created.append(Resource())
        return created[-1]

    seq = ex.using(factory, lambda r: ex.range_(0, 3))
    assert created == []  # nosec B101
    e = seq.get_enumerator()
    assert len(created) == 1 and not created[0].released  # nosec B101
    values, error = drain(e)
    assert values == [0, 1, 2] and error is None  # nosec B101
    assert created[0].releases == 1  # nosec B101
    e.dispose()
    assert created[0].releases == 1  # nosec B101
    assert seq.to_list() == [0, 1, 2] and len(created) == 2 and created[1].releases == 1  # nosec B101


def test_using_releases_on_early_dispose_and_fault():
    resource = Resource()
    e = ex.using(lambda: resource, lambda r: ex.repeat(1)).get_enumerator()
    e.move_next()
    e.dispose()
    e.dispose()
    assert resource.releases == 1  # nosec B101

    failing = Resource()
    values, error = drain(
        ex.using(lambda: failing, lambda r: ex.concat([1], ex.throw(OSError("io")))).get_enumerator()
    )
    assert values == [1] and isinstance(error, OSError)  # nosec B101
    assert failing.releases == 1  # nosec B101


def test_using_sequence_factory_failure_releases_and_raises():
    resource = Resource()

    def sequence_factory(_):
        raise KeyError("no sequence")

    seq = ex.using(lambda: resource, sequence_factory)
    with pytest.raises(KeyError):
        seq.get_enumerator()
    assert resource.releases == 1  # nosec B101


def test_using_releases_inner_before_resource():
    order = []
    resource = Resource()
    original_dispose = resource.dispose

    def dispose():
        order.append("resource")
        original_dispose()

    resource.dispose = dispose
    seq = ex.using(lambda: resource, lambda r: ex.finally_(ex.repeat(1), lambda: order.append("inner")))
    e = seq.get_enumerator()
    e.move_next()
    e.dispose()
    assert order == ["inner", "resource"]  # nosec B101


def test_create_yields_values():
    async def body(y):
        for i in range(3):
            await y.return_(i)

    seq = ex.create(body)
    assert seq.to_list() == [0, 1, 2]  # nosec B101
    assert seq.to_list() == [0, 1, 2]  # nosec B101


def test_create_break_ends_sequence_and_runs_finally():
    log = []

    async def body(y):
        try:
            await y.return_(1)
            await y.break_()
            log.append("unreachable")
        finally:
            log.append("finally")

    assert ex.create(body).to_list() == [1]  # nosec B101
    assert log == ["finally"]  # nosec B101


def test_create_early_dispose_closes_body():
    log = []

    async def body(y):
        try:
            i = 0
            while True:
                await y.return_(i)
                i += 1
        finally:
            log.append("closed")

    e = ex.create(body).get_enumerator()
    assert e.move_next() and e.move_next() and e.current == 1  # nosec B101
    assert e.body_state is BodyState.SUSPENDED  # nosec B101
    e.dispose()
    assert log == ["closed"] and e.body_state is BodyState.COMPLETED  # nosec B101


def test_create_body_fault_and_reset():
    async def body(y):
        await y.return_("a")
        raise ValueError("body")

    e = ex.create(body).get_enumerator()
    values, error = drain(e)
    assert values == ["a"] and isinstance(error, ValueError)  # nosec B101
    with pytest.raises(NotSupportedError):
        e.reset()


def test_create_rejects_foreign_awaits():
    async def body(y):
        await asyncio.sleep(0)
        await y.return_(1)

    values, error = drain(ex.create(body).get_enumerator())
    assert values == [] and isinstance(error, InvalidOperationError)  # nosec B101


def test_never_blocks_until_disposed_from_another_thread():
    e = ex.never().get_enumerator()
    errors = []

    def consume():
        try:
            e.move_next()
        except ObjectDisposedError as exc:
            errors.append(exc)

    worker = threading.Thread(target=consume)
    worker.start()
    worker.join(timeout=0.05)
    assert worker.is_alive()  # nosec B101
    e.dispose()
    worker.join(timeout=2)
    assert not worker.is_alive() and len(errors) == 1  # nosec B101
