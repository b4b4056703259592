"""Execution engine - dispatch query units against a data source."""

from .executor import ExecutionEngine
from .local import LocalEvaluator
from .results import RawResult

__all__ = ["ExecutionEngine", "LocalEvaluator", "RawResult"]
