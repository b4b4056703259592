"""Raw results produced by the execution engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..errors import CheckExecutionError
from ..planner.units import QueryUnit, UnitKind


@dataclass
class RawResult:
    """What one query unit returned, before it is mapped onto checks.

    Metadata units fill ``columns``; row units fill ``violations`` (keyed by
    check id) and ``total_rows``. A failed unit only carries ``error``.
    """
    unit_id: str
    kind: UnitKind
    check_ids: tuple[str, ...] = ()
    columns: list[tuple[str, str]] | None = None
    violations: dict[str, int] = field(default_factory=dict)
    samples: dict[str, list[Any]] = field(default_factory=dict)
    total_rows: int | None = None
    error: CheckExecutionError | None = None
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, unit: QueryUnit, message: str, duration_ms: int = 0) -> "RawResult":
        return cls(
            unit_id=unit.unit_id,
            kind=unit.kind,
            check_ids=unit.check_ids,
            error=CheckExecutionError(unit.unit_id, message),
            duration_ms=duration_ms,
        )
