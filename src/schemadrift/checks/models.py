"""Atomic checks and their results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Scope used by checks that cover the whole schema rather than one field
SCHEMA_SCOPE = "*"


class CheckKind(str, Enum):
    """Kind of constraint an atomic check verifies."""
    EXISTS = "EXISTS"
    TYPE = "TYPE"
    NOT_NULL = "NOT_NULL"
    ENUM = "ENUM"
    RANGE = "RANGE"
    REGEX = "REGEX"
    EXTRA_FIELD = "EXTRA_FIELD"

    @property
    def is_metadata(self) -> bool:
        """Resolved from column introspection rather than from rows."""
        return self in (CheckKind.EXISTS, CheckKind.TYPE, CheckKind.EXTRA_FIELD)


PRIORITY_TIERS: dict[CheckKind, int] = {
    CheckKind.EXISTS: 0,
    CheckKind.TYPE: 0,
    CheckKind.EXTRA_FIELD: 0,
    CheckKind.NOT_NULL: 1,
    CheckKind.ENUM: 2,
    CheckKind.RANGE: 2,
    CheckKind.REGEX: 2,
}


class CheckStatus(str, Enum):
    """Outcome of a check."""
    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Check:
    """Smallest independently executable unit of validation.

    Identity is the pair (field, kind). ``params`` holds the kind-specific
    arguments: ``type`` for TYPE, ``values`` for ENUM, ``min``/``max`` for
    RANGE, ``pattern`` for REGEX, ``fields`` for EXTRA_FIELD.
    """
    field: str
    kind: CheckKind
    prerequisites: tuple[str, ...] = ()
    params: tuple[tuple[str, Any], ...] = ()

    @property
    def check_id(self) -> str:
        return make_check_id(self.field, self.kind)

    @property
    def priority(self) -> int:
        return PRIORITY_TIERS[self.kind]

    @property
    def is_schema_scoped(self) -> bool:
        return self.field == SCHEMA_SCOPE

    def param(self, name: str, default: Any = None) -> Any:
        for key, value in self.params:
            if key == name:
                return value
        return default


def make_check_id(field_name: str, kind: CheckKind) -> str:
    return f"{field_name}:{kind.value}"


@dataclass
class CheckResult:
    """Resolved outcome of a single check."""
    check: Check
    status: CheckStatus
    violations: int = 0
    message: str | None = None
    samples: list[Any] = field(default_factory=list)

    @property
    def check_id(self) -> str:
        return self.check.check_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "rule": self.check.kind.value,
            "status": self.status.value,
            "violations": self.violations,
        }
        if self.message:
            data["message"] = self.message
        if self.samples:
            data["samples"] = self.samples
        return data
