"""Map raw execution results back onto checks and build the report.

Checks are resolved in decomposition order, so every prerequisite is decided
before its dependents:

- a prerequisite that did not pass makes the check ``skipped``
- a missing or failed unit result makes the check ``error``
- a positive violation count makes the check ``fail``
- anything else is ``pass``

Raw results are looked up by check id, never by arrival order.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Mapping

from ..checks.models import Check, CheckKind, CheckResult, CheckStatus
from ..engine.results import RawResult
from ..planner.units import ColumnResolver
from ..schema import types
from ..schema.models import SchemaDefinition
from .models import FieldReport, Report, Summary

logger = logging.getLogger(__name__)


def aggregate(
    schema: SchemaDefinition,
    checks: Iterable[Check],
    raw_results: Mapping[str, RawResult],
) -> Report:
    """Build the report for one run.

    Args:
        schema: The schema the checks were decomposed from
        checks: Decomposed checks, in decomposition order
        raw_results: Engine output keyed by unit id

    Returns:
        The complete Report
    """
    by_check: dict[str, RawResult] = {}
    for raw in raw_results.values():
        for check_id in raw.check_ids:
            by_check[check_id] = raw

    resolved: dict[str, CheckResult] = {}
    for check in checks:
        blocked = [
            prereq for prereq in check.prerequisites
            if resolved[prereq].status != CheckStatus.PASS
        ]
        if blocked:
            result = CheckResult(
                check=check,
                status=CheckStatus.SKIPPED,
                message=f"prerequisite {blocked[0]} {resolved[blocked[0]].status.value}",
            )
        else:
            result = _resolve(check, by_check.get(check.check_id), schema)
        resolved[check.check_id] = result

    return _build_report(schema, list(resolved.values()))


def _resolve(
    check: Check,
    raw: RawResult | None,
    schema: SchemaDefinition,
) -> CheckResult:
    if raw is None:
        return CheckResult(check, CheckStatus.ERROR, message="no query result for check")
    if raw.error is not None:
        return CheckResult(check, CheckStatus.ERROR, message=str(raw.error))
    return _RESOLVERS[check.kind](check, raw, schema)


def _resolve_exists(check: Check, raw: RawResult, schema: SchemaDefinition) -> CheckResult:
    resolver = _resolver(raw, schema)
    if resolver(check.field) is None:
        return CheckResult(
            check, CheckStatus.FAIL, violations=1, message="column not found in source"
        )
    return CheckResult(check, CheckStatus.PASS)


def _resolve_type(check: Check, raw: RawResult, schema: SchemaDefinition) -> CheckResult:
    resolver = _resolver(raw, schema)
    native_types = dict(raw.columns or [])
    actual = resolver(check.field)
    if actual is None:
        return CheckResult(check, CheckStatus.ERROR, message="column not found in source")

    declared = check.param("type")
    native = native_types[actual]
    if not types.is_compatible(declared, native):
        return CheckResult(
            check,
            CheckStatus.FAIL,
            violations=1,
            message=f"expected {declared}, found {native}",
        )
    return CheckResult(check, CheckStatus.PASS)


def _resolve_extra_field(
    check: Check,
    raw: RawResult,
    schema: SchemaDefinition,
) -> CheckResult:
    declared = {schema.field_key(name) for name in check.param("fields", ())}
    extras = [
        name for name, _ in raw.columns or []
        if schema.field_key(name) not in declared
    ]
    if extras:
        return CheckResult(
            check,
            CheckStatus.FAIL,
            violations=len(extras),
            message=f"columns not in schema: {', '.join(extras)}",
            samples=list(extras),
        )
    return CheckResult(check, CheckStatus.PASS)


def _resolve_rows(check: Check, raw: RawResult, schema: SchemaDefinition) -> CheckResult:
    if check.check_id not in raw.violations:
        return CheckResult(check, CheckStatus.ERROR, message="no measure result for check")

    count = raw.violations[check.check_id]
    if count > 0:
        scanned = f" of {raw.total_rows}" if raw.total_rows is not None else ""
        return CheckResult(
            check,
            CheckStatus.FAIL,
            violations=count,
            message=f"{count}{scanned} rows violate {check.kind.value}",
            samples=list(raw.samples.get(check.check_id, [])),
        )
    return CheckResult(check, CheckStatus.PASS)


def _resolver(raw: RawResult, schema: SchemaDefinition) -> ColumnResolver:
    return ColumnResolver(
        [name for name, _ in raw.columns or []],
        case_insensitive=schema.case_insensitive,
    )


_RESOLVERS: dict[
    CheckKind, Callable[[Check, RawResult, SchemaDefinition], CheckResult]
] = {
    CheckKind.EXISTS: _resolve_exists,
    CheckKind.TYPE: _resolve_type,
    CheckKind.EXTRA_FIELD: _resolve_extra_field,
    CheckKind.NOT_NULL: _resolve_rows,
    CheckKind.ENUM: _resolve_rows,
    CheckKind.RANGE: _resolve_rows,
    CheckKind.REGEX: _resolve_rows,
}


def _field_status(results: list[CheckResult]) -> CheckStatus:
    statuses = {result.status for result in results}
    if CheckStatus.FAIL in statuses:
        return CheckStatus.FAIL
    if CheckStatus.ERROR in statuses:
        return CheckStatus.ERROR
    return CheckStatus.PASS


def _build_report(schema: SchemaDefinition, results: list[CheckResult]) -> Report:
    summary = Summary()
    per_field: dict[str, list[CheckResult]] = {name: [] for name in schema.field_names}
    schema_checks: list[CheckResult] = []
    schema_extras: list[str] = []

    for result in results:
        summary.add(result)
        if result.check.is_schema_scoped:
            schema_checks.append(result)
            if result.check.kind is CheckKind.EXTRA_FIELD and schema.strict_mode:
                schema_extras.extend(result.samples)
        else:
            per_field[result.check.field].append(result)

    fields = [
        FieldReport(field=name, status=_field_status(checks), checks=checks)
        for name, checks in per_field.items()
    ]

    statuses = {report.status for report in fields}
    statuses.update(result.status for result in schema_checks)
    if CheckStatus.FAIL in statuses or schema_extras:
        status = CheckStatus.FAIL
    elif CheckStatus.ERROR in statuses:
        status = CheckStatus.ERROR
    else:
        status = CheckStatus.PASS

    logger.debug(
        "Aggregated %d checks: %d passed, %d failed, %d errored, %d skipped",
        summary.total_checks,
        summary.passed,
        summary.failed,
        summary.errored,
        summary.skipped,
    )
    return Report(
        status=status,
        summary=summary,
        fields=fields,
        schema_checks=schema_checks,
        schema_extras=schema_extras,
    )
