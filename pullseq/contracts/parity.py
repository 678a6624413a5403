"""Source-level parity check between a surface module and the operator table."""

from __future__ import annotations

import inspect
from types import ModuleType
from typing import Iterable, List, Optional, Union

from ..base.logging import get_logger, log_event
from .models import OperatorContract, ParityIssue, Surface
from .table import OPERATOR_CONTRACTS

logger = get_logger("pullseq.contracts")


def _parameter_names(func: object) -> Optional[tuple]:
    try:
        signature = inspect.signature(func)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return tuple(signature.parameters)


def check_surface_parity(
    module: ModuleType,
    surface: Union[Surface, str],
    contracts: Iterable[OperatorContract] = OPERATOR_CONTRACTS,
) -> List[ParityIssue]:
    """Compare ``module`` against every contract that names ``surface``.

    Returns one :class:`ParityIssue` per operator that is missing, not
    callable, or whose parameter names differ. An empty list means parity.
    """
    surface = Surface(surface)
    issues: List[ParityIssue] = []
    for contract in contracts:
        if surface not in contract.surfaces:
            continue
        expected = contract.parameters_for(surface)
        func = getattr(module, contract.name, None)
        if func is None or not callable(func):
            issues.append(ParityIssue(operator=contract.name, surface=surface, problem="missing", expected=expected))
            continue
        actual = _parameter_names(func)
        if actual is None:
            issues.append(ParityIssue(operator=contract.name, surface=surface, problem="no_signature", expected=expected))
        elif actual != expected:
            issues.append(
                ParityIssue(
                    operator=contract.name,
                    surface=surface,
                    problem="parameters",
                    expected=expected,
                    actual=actual,
                )
            )
    if issues:
        log_event(
            logger,
            "contracts.parity_mismatch",
            surface=surface.value,
            operators=[issue.operator for issue in issues],
        )
    return issues


__all__ = ["check_surface_parity"]
