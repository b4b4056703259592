"""Query units - what the execution engine runs against a source."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from ..checks.models import CheckKind


class UnitKind(str, Enum):
    """How a query unit is executed."""
    METADATA = "metadata"            # column introspection for EXISTS/TYPE
    EXTRA_FIELDS = "extra_fields"    # column introspection for EXTRA_FIELD
    PUSHDOWN = "pushdown"            # one native aggregate query
    LOCAL_SCAN = "local_scan"        # rows streamed and checked in-process


@dataclass(frozen=True)
class Measure:
    """One row check's contribution to a batch: a filtered violation count.

    ``alias`` names the measure's output in the rows a source returns.
    ``column`` starts as the declared field name and is rebound to the
    source's actual column name before execution.
    """
    check_id: str
    kind: CheckKind
    column: str
    alias: str
    params: tuple[tuple[str, Any], ...] = ()
    cast_text: bool = False

    def param(self, name: str, default: Any = None) -> Any:
        for key, value in self.params:
            if key == name:
                return value
        return default


@dataclass(frozen=True)
class QueryUnit:
    """A planned unit of work against one source.

    Row units depend on the metadata unit: they need the resolved column
    names before they can run.
    """
    unit_id: str
    kind: UnitKind
    check_ids: tuple[str, ...]
    table: str | None = None
    measures: tuple[Measure, ...] = ()
    depends_on: tuple[str, ...] = ()

    @property
    def is_row_unit(self) -> bool:
        return self.kind in (UnitKind.PUSHDOWN, UnitKind.LOCAL_SCAN)

    @property
    def columns(self) -> list[str]:
        """Distinct measured columns, in measure order."""
        seen: list[str] = []
        for measure in self.measures:
            if measure.column not in seen:
                seen.append(measure.column)
        return seen

    def bind(self, resolve: "ColumnResolver") -> "QueryUnit":
        """Rebind measures to actual column names, dropping absent columns."""
        bound = []
        for measure in self.measures:
            actual = resolve(measure.column)
            if actual is not None:
                bound.append(replace(measure, column=actual))
        return replace(self, measures=tuple(bound))


class ColumnResolver:
    """Callable mapping a declared field name to the source's column name."""

    def __init__(self, columns: list[str], case_insensitive: bool = False) -> None:
        self.case_insensitive = case_insensitive
        self._lookup: dict[str, str] = {}
        for name in columns:
            self._lookup.setdefault(self._key(name), name)

    def _key(self, name: str) -> str:
        return name.casefold() if self.case_insensitive else name

    def __call__(self, field_name: str) -> str | None:
        return self._lookup.get(self._key(field_name))
