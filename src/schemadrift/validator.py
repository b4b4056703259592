"""Orchestrate a validation run from schema to report."""

from __future__ import annotations

import logging
import time
from typing import Protocol

from .checks.decomposer import decompose
from .config import EngineConfig
from .engine.executor import ExecutionEngine
from .planner.planner import plan
from .report.aggregator import aggregate
from .report.models import Report
from .schema.models import SchemaDefinition
from .sources.base import DataSourceAdapter

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    def report_start(self, schema: SchemaDefinition, source: DataSourceAdapter) -> None: ...

    def report_result(self, report: Report) -> None: ...

    def report_error(self, message: str) -> None: ...


class SchemaValidator:
    """Validate one data source against one schema definition.

    Example:
        schema = load_schema("schemas/users.json")
        source = open_source("exports/users.parquet")
        report = SchemaValidator(schema, source).run()

        sys.exit(exit_code(report))
    """

    def __init__(
        self,
        schema: SchemaDefinition,
        source: DataSourceAdapter,
        config: EngineConfig | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            schema: Expected structure of the source
            source: Adapter for the live source (connected on run)
            config: Engine limits (default: EngineConfig())
            reporter: Optional reporter notified of the run
        """
        self.schema = schema
        self.source = source
        self.reporter = reporter
        self.engine = ExecutionEngine(config, case_insensitive=schema.case_insensitive)

    def run(self) -> Report:
        """Run every check and return the report.

        Raises:
            SourceConnectionError: If the source cannot be reached; no report
                is produced in that case
        """
        start_time = time.perf_counter()
        if self.reporter is not None:
            self.reporter.report_start(self.schema, self.source)

        checks = decompose(self.schema)
        with self.source:
            capabilities = self.source.capabilities()
            units = plan(checks, capabilities, table=self.schema.table)
            raw_results = self.engine.execute(units, self.source)

        report = aggregate(self.schema, checks, raw_results)
        duration = time.perf_counter() - start_time

        logger.info(
            "Validated %r: %s (%d/%d checks passed, %d units) in %.2fs",
            self.source,
            report.status.value,
            report.summary.passed,
            report.summary.total_checks,
            len(units),
            duration,
        )
        if self.reporter is not None:
            self.reporter.report_result(report)
        return report


def validate(
    schema: SchemaDefinition,
    source: DataSourceAdapter,
    config: EngineConfig | None = None,
) -> Report:
    """Validate a source against a schema and return the report."""
    return SchemaValidator(schema, source, config).run()
