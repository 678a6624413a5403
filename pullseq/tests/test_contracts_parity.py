"""Both surfaces expose the operator table with matching parameter names."""
from __future__ import annotations

import types

import pytest
from pydantic import ValidationError

from pullseq import async_enumerable, enumerable
from pullseq.contracts import (
    OPERATOR_CONTRACTS,
    OperatorCategory,
    OperatorContract,
    Surface,
    check_surface_parity,
    contracts_by_name,
)

from .utils import assert_true


@pytest.mark.parametrize("module, surface", [(enumerable, "sync"), (async_enumerable, "async")])
def test_surface_matches_operator_table(module, surface):
    issues = check_surface_parity(module, surface)
    assert_true(issues == [], f"parity issues on {surface}: {issues!r}")


def test_table_names_are_unique_and_shared_operators_span_both_surfaces():
    names = [c.name for c in OPERATOR_CONTRACTS]
    assert_true(len(names) == len(set(names)), "duplicate operator names")
    by_name = contracts_by_name()
    shared = (
        "catch", "catch_many", "retry", "on_error_resume_next", "finally_",
        "using", "generate", "defer", "scan", "distinct_until_changed", "buffer",
    )
    for required in shared:
        assert_true(by_name[required].surfaces == frozenset({Surface.SYNC, Surface.ASYNC}), required)
    assert_true(by_name["to_list"].parameters_for(Surface.ASYNC) == ("source", "token"), "async to_list token")


def test_mismatches_are_reported():
    fake = types.ModuleType("fake")

    def retry(source, attempts=None):
        return source

    fake.retry = retry
    contracts = [
        OperatorContract(name="retry", category=OperatorCategory.ERROR_RECOVERY, parameters=("source", "count")),
        OperatorContract(name="defer", category=OperatorCategory.CREATION, parameters=("factory",)),
    ]
    issues = check_surface_parity(fake, Surface.SYNC, contracts)
    problems = {issue.operator: issue.problem for issue in issues}
    assert_true(problems == {"retry": "parameters", "defer": "missing"}, f"unexpected {problems!r}")


def test_contracts_are_frozen():
    contract = contracts_by_name()["retry"]
    with pytest.raises(ValidationError):
        contract.name = "other"
