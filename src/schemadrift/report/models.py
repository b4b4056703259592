"""Report models - the terminal artifact of a validation run."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ..checks.models import CheckResult, CheckStatus


@dataclass
class Summary:
    """Check counts across the whole report."""
    total_checks: int = 0
    passed: int = 0
    failed: int = 0
    errored: int = 0
    skipped: int = 0

    def add(self, result: CheckResult) -> None:
        """Count a check result."""
        self.total_checks += 1
        if result.status == CheckStatus.PASS:
            self.passed += 1
        elif result.status == CheckStatus.FAIL:
            self.failed += 1
        elif result.status == CheckStatus.ERROR:
            self.errored += 1
        elif result.status == CheckStatus.SKIPPED:
            self.skipped += 1

    def to_dict(self) -> dict[str, int]:
        return {
            "total_checks": self.total_checks,
            "passed": self.passed,
            "failed": self.failed,
            "errored": self.errored,
            "skipped": self.skipped,
        }


@dataclass
class FieldReport:
    """Results of every check owned by one declared field."""
    field: str
    status: CheckStatus
    checks: list[CheckResult] = field(default_factory=list)

    def get_check(self, rule: str) -> CheckResult | None:
        """Get a check result by kind name, e.g. 'ENUM'."""
        for result in self.checks:
            if result.check.kind.value == rule:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "checks": [result.to_dict() for result in self.checks],
        }


@dataclass
class Report:
    """Outcome of validating one source against one schema definition.

    Fields keep the schema's declared order. The report holds no timestamps
    and no reference to the source, so rerunning against an unchanged source
    produces identical JSON.
    """
    status: CheckStatus
    summary: Summary
    fields: list[FieldReport] = field(default_factory=list)
    schema_checks: list[CheckResult] = field(default_factory=list)
    schema_extras: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status == CheckStatus.PASS

    def get_field(self, name: str) -> FieldReport | None:
        """Get a field report by declared field name."""
        for report in self.fields:
            if report.field == name:
                return report
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "status": self.status.value,
            "summary": self.summary.to_dict(),
            "schema_extras": list(self.schema_extras),
            "schema_checks": [result.to_dict() for result in self.schema_checks],
            "fields": {report.field: report.to_dict() for report in self.fields},
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False, default=str)
