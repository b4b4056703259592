"""🧭 Capability-aware query planner.

Execution cost is bound by the number of passes over the source, not by the
number of checks, so the planner packs as many row checks as the source's
capability profile allows into each pass:

- EXISTS and TYPE checks share one metadata unit (column introspection).
- EXTRA_FIELD gets its own metadata unit, independent of row batches.
- Row checks (NOT_NULL, ENUM, RANGE, REGEX) on the table become pushdown
  batches of at most ``max_batch_size`` measures each.
- Row checks the source cannot push down all share one local scan unit,
  so rows are streamed once no matter how many checks need them.

The planner never looks at outcomes. Prerequisites stay on the checks and
the aggregator honors them.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..checks.models import Check, CheckKind
from ..sources.base import DataSourceCapabilities
from .units import Measure, QueryUnit, UnitKind

logger = logging.getLogger(__name__)

METADATA_UNIT_ID = "metadata"
EXTRA_FIELDS_UNIT_ID = "extra_fields"
LOCAL_SCAN_UNIT_ID = "local_scan"


def plan(
    checks: Iterable[Check],
    capabilities: DataSourceCapabilities,
    table: str | None = None,
) -> tuple[QueryUnit, ...]:
    """Group checks into the minimal ordered set of query units.

    Args:
        checks: Decomposed checks, in decomposition order
        capabilities: The source's capability profile
        table: Table the row checks run against

    Returns:
        Query units: metadata units first, then pushdown batches, then the
        local scan unit (if any)
    """
    metadata_ids: list[str] = []
    extra_ids: list[str] = []
    pushdown: list[Check] = []
    local: list[Check] = []

    for check in checks:
        if check.kind is CheckKind.EXTRA_FIELD:
            extra_ids.append(check.check_id)
        elif check.kind.is_metadata:
            metadata_ids.append(check.check_id)
        elif _can_push_down(check, capabilities):
            pushdown.append(check)
        else:
            local.append(check)

    units: list[QueryUnit] = []
    row_dependencies: tuple[str, ...] = ()

    if metadata_ids or pushdown or local:
        units.append(
            QueryUnit(
                unit_id=METADATA_UNIT_ID,
                kind=UnitKind.METADATA,
                check_ids=tuple(metadata_ids),
                table=table,
            )
        )
        row_dependencies = (METADATA_UNIT_ID,)

    if extra_ids:
        units.append(
            QueryUnit(
                unit_id=EXTRA_FIELDS_UNIT_ID,
                kind=UnitKind.EXTRA_FIELDS,
                check_ids=tuple(extra_ids),
                table=table,
            )
        )

    batch_size = capabilities.max_batch_size
    for index, start in enumerate(range(0, len(pushdown), batch_size)):
        batch = pushdown[start:start + batch_size]
        units.append(
            QueryUnit(
                unit_id=f"pushdown_{index}",
                kind=UnitKind.PUSHDOWN,
                check_ids=tuple(check.check_id for check in batch),
                table=table,
                measures=_measures(batch, capabilities),
                depends_on=row_dependencies,
            )
        )

    if local:
        units.append(
            QueryUnit(
                unit_id=LOCAL_SCAN_UNIT_ID,
                kind=UnitKind.LOCAL_SCAN,
                check_ids=tuple(check.check_id for check in local),
                table=table,
                measures=_measures(local, capabilities),
                depends_on=row_dependencies,
            )
        )

    logger.debug(
        "Planned %d units (%d pushdown checks, %d local checks)",
        len(units),
        len(pushdown),
        len(local),
    )
    return tuple(units)


def _can_push_down(check: Check, capabilities: DataSourceCapabilities) -> bool:
    if not capabilities.supports_pushdown:
        return False
    if check.kind is CheckKind.REGEX and not capabilities.supports_regex:
        return False
    return True


def _measures(
    checks: list[Check],
    capabilities: DataSourceCapabilities,
) -> tuple[Measure, ...]:
    return tuple(
        Measure(
            check_id=check.check_id,
            kind=check.kind,
            column=check.field,
            alias=f"m{position}",
            params=check.params,
            cast_text=(
                check.kind is CheckKind.ENUM
                and not capabilities.supports_enum_native_type
            ),
        )
        for position, check in enumerate(checks)
    )
