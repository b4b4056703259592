"""🚨 Error taxonomy for validation runs.

Fatal errors abort a run before any report exists. Check execution errors
stay local to one query unit and surface as ``error`` checks in the report.
"""

from __future__ import annotations


class SchemaDriftError(Exception):
    """Base class for every error raised by schemadrift."""


class FatalError(SchemaDriftError):
    """An error that prevents a report from being produced."""


class SchemaParseError(FatalError):
    """The schema definition is malformed or internally inconsistent."""

    def __init__(self, message: str, problems: list[str] | None = None) -> None:
        self.problems = problems or []
        if self.problems:
            message = f"{message}: " + "; ".join(self.problems)
        super().__init__(message)


class SourceConnectionError(FatalError, ConnectionError):
    """The data source could not be reached."""


class CheckExecutionError(SchemaDriftError):
    """A single query unit failed; its checks resolve to ``error``."""

    def __init__(self, unit_id: str, message: str) -> None:
        self.unit_id = unit_id
        super().__init__(f"{unit_id}: {message}")
