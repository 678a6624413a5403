"""Fields shared by every event an enumerator emits.

A :class:`LogContext` names the operator, the surface it runs on and the
enumerator instance. Ad-hoc keys go in ``extra``; ``to_dict`` flattens them
next to the named fields and leaves out anything that is ``None``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    operator: Optional[str] = None
    surface: Optional[str] = None
    enumerator_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        named = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        merged = {**named, **(self.extra or {})}
        return {key: value for key, value in merged.items() if value is not None}


__all__ = ["LogContext"]
