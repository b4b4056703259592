"""JSON reporter for validation reports.

Outputs the report as structured JSON for CI/CD integration.
"""

from __future__ import annotations

import json
import sys
from typing import TextIO

from ..report.models import Report
from ..schema.models import SchemaDefinition
from ..sources.base import DataSourceAdapter


class JSONReporter:
    """Output the report as JSON."""

    def __init__(
        self,
        output: TextIO | None = None,
        pretty: bool = False,
    ) -> None:
        """Initialize the JSON reporter.

        Args:
            output: File to write to (default: stdout)
            pretty: Pretty-print JSON with indentation
        """
        self.output = output or sys.stdout
        self.pretty = pretty

    def report_start(self, schema: SchemaDefinition, source: DataSourceAdapter) -> None:
        """Nothing is written until the report exists."""

    def report_result(self, report: Report) -> None:
        """Output the final JSON report."""
        self.output.write(report.to_json(indent=2 if self.pretty else None))
        self.output.write("\n")

    def report_error(self, message: str) -> None:
        """Output error as JSON."""
        json.dump({"error": True, "message": message}, self.output, default=str)
        self.output.write("\n")
