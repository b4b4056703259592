"""Batched full-scan evaluator for sources without pushdown.

All measures of a local scan unit are evaluated in a single pass over the
streamed rows. Semantics match the SQL the DuckDB source generates:

- NOT_NULL: value is missing
- ENUM:     value present and its text form is not an allowed value
- RANGE:    value present and not a number, or outside [min, max]
- REGEX:    value present and its text form has no match for the pattern
"""

from __future__ import annotations

import re
from typing import Any, Callable

from ..checks.models import CheckKind
from ..planner.units import Measure, QueryUnit
from ..sources.base import DataSourceAdapter
from .results import RawResult

Predicate = Callable[[Any], bool]


class LocalEvaluator:
    """Evaluate a local scan unit against streamed rows."""

    def __init__(self, sample_limit: int = 5) -> None:
        self.sample_limit = sample_limit

    def evaluate(self, unit: QueryUnit, adapter: DataSourceAdapter) -> RawResult:
        predicates = [(measure, self._violation_predicate(measure)) for measure in unit.measures]
        violations = {measure.check_id: 0 for measure in unit.measures}
        samples: dict[str, list[Any]] = {measure.check_id: [] for measure in unit.measures}
        total_rows = 0

        if predicates:
            for row in adapter.stream_rows(unit.columns, unit.table):
                total_rows += 1
                for measure, is_violation in predicates:
                    value = row.get(measure.column)
                    if is_violation(value):
                        violations[measure.check_id] += 1
                        self._keep_sample(samples[measure.check_id], value)

        return RawResult(
            unit_id=unit.unit_id,
            kind=unit.kind,
            violations=violations,
            samples={key: values for key, values in samples.items() if values},
            total_rows=total_rows,
        )

    def _keep_sample(self, kept: list[Any], value: Any) -> None:
        if len(kept) >= self.sample_limit:
            return
        sample = _stringify(value)
        if sample not in kept:
            kept.append(sample)

    def _violation_predicate(self, measure: Measure) -> Predicate:
        return _PREDICATES[measure.kind](measure)


def _stringify(value: Any) -> Any:
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _not_null(measure: Measure) -> Predicate:
    return lambda value: value is None


def _enum(measure: Measure) -> Predicate:
    allowed = frozenset(str(value) for value in measure.param("values", ()))
    return lambda value: value is not None and str(value) not in allowed


def _range(measure: Measure) -> Predicate:
    low = measure.param("min")
    high = measure.param("max")

    def out_of_range(value: Any) -> bool:
        if value is None:
            return False
        number = _as_number(value)
        if number is None:
            return True
        if low is not None and number < low:
            return True
        return high is not None and number > high

    return out_of_range


def _regex(measure: Measure) -> Predicate:
    pattern = re.compile(measure.param("pattern", ""))
    return lambda value: value is not None and pattern.search(str(value)) is None


_PREDICATES: dict[CheckKind, Callable[[Measure], Predicate]] = {
    CheckKind.NOT_NULL: _not_null,
    CheckKind.ENUM: _enum,
    CheckKind.RANGE: _range,
    CheckKind.REGEX: _regex,
}
