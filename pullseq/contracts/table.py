"""The operator table both surfaces are checked against."""

from __future__ import annotations

from typing import Dict, Tuple

from .models import OperatorCategory, OperatorContract, Surface

_C = OperatorCategory.CREATION
_E = OperatorCategory.ERROR_RECOVERY
_H = OperatorCategory.HELPER
_V = OperatorCategory.CONVERSION
_T = OperatorCategory.TERMINAL

_SYNC_ONLY = frozenset({Surface.SYNC})
_ASYNC_ONLY = frozenset({Surface.ASYNC})

OPERATOR_CONTRACTS: Tuple[OperatorContract, ...] = (
    # creation
    OperatorContract(name="return_", category=_C, parameters=("value",)),
    OperatorContract(name="empty", category=_C),
    OperatorContract(name="never", category=_C),
    OperatorContract(name="throw", category=_C, parameters=("error",)),
    OperatorContract(name="range_", category=_C, parameters=("start", "count")),
    OperatorContract(name="repeat", category=_C, parameters=("value", "count")),
    OperatorContract(name="repeat_sequence", category=_C, parameters=("source", "count")),
    OperatorContract(name="defer", category=_C, parameters=("factory",)),
    OperatorContract(name="generate", category=_C, parameters=("initial", "condition", "iterate", "select")),
    OperatorContract(name="using", category=_C, parameters=("resource_factory", "sequence_factory")),
    OperatorContract(name="create", category=_C, parameters=("body",)),
    OperatorContract(name="create_enumerator", category=_C, parameters=("move_next", "current", "dispose")),
    OperatorContract(name="create_enumerable", category=_C, parameters=("get_enumerator",)),
    # error recovery
    OperatorContract(name="catch", category=_E, parameters=("source", "handler", "exception_type")),
    OperatorContract(name="catch_many", category=_E, parameters=("sources",)),
    OperatorContract(name="retry", category=_E, parameters=("source", "count")),
    OperatorContract(name="on_error_resume_next", category=_E, parameters=("sources",)),
    OperatorContract(name="finally_", category=_E, parameters=("source", "action")),
    # helpers
    OperatorContract(name="concat", category=_H, parameters=("sources",)),
    OperatorContract(name="start_with", category=_H, parameters=("source", "values")),
    OperatorContract(name="do", category=_H, parameters=("source", "on_next", "on_error", "on_completed")),
    OperatorContract(name="ignore_elements", category=_H, parameters=("source",)),
    OperatorContract(name="select", category=_H, parameters=("source", "selector")),
    OperatorContract(name="where", category=_H, parameters=("source", "predicate")),
    OperatorContract(name="hide", category=_H, parameters=("source",), surfaces=_SYNC_ONLY),
    OperatorContract(name="scan", category=_H, parameters=("source", "accumulator", "seed")),
    OperatorContract(name="distinct_until_changed", category=_H, parameters=("source", "key_selector")),
    OperatorContract(name="buffer", category=_H, parameters=("source", "count", "skip")),
    # conversions
    OperatorContract(name="from_iterable", category=_V, parameters=("iterable",), surfaces=_SYNC_ONLY),
    OperatorContract(name="to_async_enumerable", category=_V, parameters=("iterable",), surfaces=_ASYNC_ONLY),
    # terminal drivers
    OperatorContract(
        name="to_list", category=_T, parameters=("source",), async_parameters=("source", "token")
    ),
    OperatorContract(
        name="for_each",
        category=_T,
        parameters=("source", "action", "with_index"),
        async_parameters=("source", "action", "token"),
    ),
)


def contracts_by_name() -> Dict[str, OperatorContract]:
    return {contract.name: contract for contract in OPERATOR_CONTRACTS}


__all__ = ["OPERATOR_CONTRACTS", "contracts_by_name"]
