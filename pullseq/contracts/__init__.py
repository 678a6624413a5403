"""Operator contract table and surface parity check.

Usage::

    from pullseq import async_enumerable, enumerable
    from pullseq.contracts import check_surface_parity

    assert not check_surface_parity(enumerable, "sync")
    assert not check_surface_parity(async_enumerable, "async")
"""

from .models import BOTH_SURFACES, OperatorCategory, OperatorContract, ParityIssue, Surface
from .parity import check_surface_parity
from .table import OPERATOR_CONTRACTS, contracts_by_name

__all__ = [
    "Surface",
    "OperatorCategory",
    "BOTH_SURFACES",
    "OperatorContract",
    "ParityIssue",
    "OPERATOR_CONTRACTS",
    "contracts_by_name",
    "check_surface_parity",
]
