"""Atomic checks derived from a schema definition."""

from .decomposer import decompose
from .models import (
    SCHEMA_SCOPE,
    Check,
    CheckKind,
    CheckResult,
    CheckStatus,
    make_check_id,
)

__all__ = [
    "SCHEMA_SCOPE",
    "Check",
    "CheckKind",
    "CheckResult",
    "CheckStatus",
    "decompose",
    "make_check_id",
]
