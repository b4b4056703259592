"""📊 Reports - aggregation and exit status."""

from .aggregator import aggregate
from .exit_codes import ExitStatus, exit_code, exit_code_for_error
from .models import FieldReport, Report, Summary

__all__ = [
    "ExitStatus",
    "FieldReport",
    "Report",
    "Summary",
    "aggregate",
    "exit_code",
    "exit_code_for_error",
]
