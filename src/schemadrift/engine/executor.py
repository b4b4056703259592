"""⚡ Execution engine - run query units against a source.

Units run in waves: every unit whose dependencies have completed is
dispatched to a bounded thread pool, and the next wave starts once the
current one has resolved. Row units are bound to the source's real column
names using the metadata unit's result before they are dispatched.

Failure semantics:
- ``SourceConnectionError`` is fatal: queued units are cancelled, completed
  results are dropped, and the error propagates to the caller.
- Any other error, or a unit running past its timeout, only fails that unit.
  Its checks later resolve to ``error`` and sibling units carry on.
- Query failures are never retried.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from contextlib import nullcontext
from typing import Any, ContextManager, Iterable

from ..config import EngineConfig
from ..errors import SourceConnectionError
from ..planner.units import ColumnResolver, QueryUnit, UnitKind
from ..sources.base import TOTAL_ROWS_ALIAS, DataSourceAdapter
from .local import LocalEvaluator
from .results import RawResult

logger = logging.getLogger(__name__)


class ExecutionEngine:
    """Dispatch planned query units and collect their raw results.

    Example:
        engine = ExecutionEngine(EngineConfig(max_workers=2))
        raw = engine.execute(units, source)
        raw["metadata"].columns
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        case_insensitive: bool = False,
    ) -> None:
        self.config = config or EngineConfig()
        self.case_insensitive = case_insensitive
        self.local_evaluator = LocalEvaluator(sample_limit=self.config.sample_limit)

    def execute(
        self,
        units: Iterable[QueryUnit],
        adapter: DataSourceAdapter,
    ) -> dict[str, RawResult]:
        """Execute every unit and return raw results keyed by unit id.

        Raises:
            SourceConnectionError: If the source connection is lost
        """
        remaining = list(units)
        results: dict[str, RawResult] = {}
        capabilities = adapter.capabilities()
        session: ContextManager[Any] = (
            nullcontext() if capabilities.thread_safe else threading.Lock()
        )

        while remaining:
            wave = [
                unit for unit in remaining
                if all(dep in results for dep in unit.depends_on)
            ]
            if not wave:
                missing = sorted({dep for unit in remaining for dep in unit.depends_on})
                raise ValueError(f"Unsatisfiable unit dependencies: {missing}")

            runnable = []
            for unit in wave:
                prepared = self._prepare(unit, results)
                if isinstance(prepared, RawResult):
                    results[unit.unit_id] = prepared
                else:
                    runnable.append(prepared)

            results.update(self._run_wave(runnable, adapter, session))
            remaining = [unit for unit in remaining if unit.unit_id not in results]

        return results

    def _prepare(
        self,
        unit: QueryUnit,
        results: dict[str, RawResult],
    ) -> QueryUnit | RawResult:
        """Bind a row unit to real column names, or fail it early."""
        if not unit.is_row_unit:
            return unit

        for dep in unit.depends_on:
            metadata = results[dep]
            if not metadata.ok or metadata.columns is None:
                return RawResult.failed(unit, f"column metadata unavailable ({dep} failed)")
            resolver = ColumnResolver(
                [name for name, _ in metadata.columns],
                case_insensitive=self.case_insensitive,
            )
            unit = unit.bind(resolver)
        return unit

    def _run_wave(
        self,
        units: list[QueryUnit],
        adapter: DataSourceAdapter,
        session: ContextManager[Any],
    ) -> dict[str, RawResult]:
        if not units:
            return {}

        results: dict[str, RawResult] = {}
        started: dict[str, float] = {}
        pool = ThreadPoolExecutor(
            max_workers=min(self.config.max_workers, len(units)),
            thread_name_prefix="schemadrift",
        )
        try:
            futures: dict[Future[RawResult], QueryUnit] = {
                pool.submit(self._dispatch, unit, adapter, session, started): unit
                for unit in units
            }
            pending = set(futures)
            while pending:
                done, pending = wait(
                    pending,
                    timeout=self.config.poll_interval,
                    return_when=FIRST_COMPLETED,
                )
                for future in done:
                    unit = futures[future]
                    results[unit.unit_id] = future.result()

                now = time.monotonic()
                for future in list(pending):
                    unit = futures[future]
                    started_at = started.get(unit.unit_id)
                    timeout = self.config.unit_timeout
                    if started_at is not None and now - started_at > timeout:
                        pending.discard(future)
                        future.cancel()
                        logger.warning("Unit %s timed out after %.1fs", unit.unit_id, timeout)
                        results[unit.unit_id] = RawResult.failed(
                            unit,
                            f"timed out after {timeout:g}s",
                            duration_ms=int((now - started_at) * 1000),
                        )
        except SourceConnectionError as e:
            logger.error("Fatal source error, cancelling queued units: %s", e)
            raise
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        return results

    def _dispatch(
        self,
        unit: QueryUnit,
        adapter: DataSourceAdapter,
        session: ContextManager[Any],
        started: dict[str, float],
    ) -> RawResult:
        start = time.monotonic()
        try:
            with session:
                # The unit's clock starts once it holds the session
                started[unit.unit_id] = start = time.monotonic()
                logger.debug("Dispatching unit %s (%s)", unit.unit_id, unit.kind.value)
                result = self._run_unit(unit, adapter)
        except SourceConnectionError:
            raise
        except Exception as e:
            logger.warning("Unit %s failed: %s", unit.unit_id, e)
            return RawResult.failed(
                unit,
                str(e) or type(e).__name__,
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        result.check_ids = unit.check_ids
        result.duration_ms = int((time.monotonic() - start) * 1000)
        return result

    def _run_unit(self, unit: QueryUnit, adapter: DataSourceAdapter) -> RawResult:
        if unit.kind in (UnitKind.METADATA, UnitKind.EXTRA_FIELDS):
            return RawResult(
                unit_id=unit.unit_id,
                kind=unit.kind,
                columns=adapter.columns(unit.table),
            )

        if unit.kind is UnitKind.LOCAL_SCAN:
            return self.local_evaluator.evaluate(unit, adapter)

        if not unit.measures:
            return RawResult(unit_id=unit.unit_id, kind=unit.kind)

        rows = adapter.run_pushdown(unit)
        if len(rows) != 1:
            raise ValueError(f"pushdown returned {len(rows)} rows, expected 1")
        row = rows[0]
        total_rows = row.get(TOTAL_ROWS_ALIAS)
        return RawResult(
            unit_id=unit.unit_id,
            kind=unit.kind,
            violations={
                measure.check_id: int(row[measure.alias]) for measure in unit.measures
            },
            total_rows=int(total_rows) if total_rows is not None else None,
        )
