"""Operator contract DTOs.

An ``OperatorContract`` names one operator, the parameter names it takes,
and which surfaces must provide it. ``ParityIssue`` is one mismatch reported
by :func:`pullseq.contracts.check_surface_parity`.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Surface(str, Enum):
    SYNC = "sync"
    ASYNC = "async"


class OperatorCategory(str, Enum):
    CREATION = "creation"
    ERROR_RECOVERY = "error_recovery"
    HELPER = "helper"
    CONVERSION = "conversion"
    TERMINAL = "terminal"


BOTH_SURFACES = frozenset({Surface.SYNC, Surface.ASYNC})


class OperatorContract(BaseModel):
    """Source-level contract of one operator.

    Attributes:
        name: Module-level function name on each surface.
        category: Grouping used in reports.
        parameters: Parameter names, in order, on the sync surface.
        async_parameters: Parameter names on the async surface when they
            differ (terminal drivers take a ``token``).
        surfaces: Surfaces that must export the operator.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    category: OperatorCategory
    parameters: Tuple[str, ...] = ()
    async_parameters: Optional[Tuple[str, ...]] = None
    surfaces: FrozenSet[Surface] = Field(default=BOTH_SURFACES)

    def parameters_for(self, surface: Surface) -> Tuple[str, ...]:
        if surface is Surface.ASYNC and self.async_parameters is not None:
            return self.async_parameters
        return self.parameters


class ParityIssue(BaseModel):
    """One operator that a surface is missing or exposes with other parameters."""

    model_config = ConfigDict(frozen=True)

    operator: str
    surface: Surface
    problem: str
    expected: Tuple[str, ...] = ()
    actual: Tuple[str, ...] = ()


__all__ = [
    "Surface",
    "OperatorCategory",
    "BOTH_SURFACES",
    "OperatorContract",
    "ParityIssue",
]
