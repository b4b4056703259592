"""📋 Schema definition models.

A schema definition is the declared expectation of a table: an ordered list
of field rules plus global options. Definitions are immutable once parsed and
every constraint is checked against its field's declared type here, so that
nothing type-related can go wrong later during execution.
"""

from __future__ import annotations

import math
import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from . import types


class FieldFormat(str, Enum):
    """Well-known string formats, checked as regular expressions."""
    DATETIME = "datetime"
    DATE = "date"
    EMAIL = "email"
    UUID = "uuid"


FORMAT_PATTERNS: dict[FieldFormat, str] = {
    FieldFormat.DATETIME: (
        r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:?\d{2})?$"
    ),
    FieldFormat.DATE: r"^\d{4}-\d{2}-\d{2}$",
    FieldFormat.EMAIL: r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
    FieldFormat.UUID: (
        r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
    ),
}


class FieldRule(BaseModel):
    """Expectation for a single column.

    Example (JSON):
        {"field": "user_tier", "type": "string", "required": true,
         "enum": ["FREE", "PREMIUM"]}
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    field: str = Field(..., min_length=1, description="Column name in the source")
    declared_type: str | None = Field(
        default=None,
        alias="type",
        description="Declared type, e.g. 'string', 'integer', 'datetime'",
    )
    required: bool = Field(default=False, description="Column must hold no nulls")

    allowed: tuple[str, ...] | None = Field(
        default=None,
        alias="enum",
        description="Accepted values",
    )
    minimum: int | float | None = Field(default=None, alias="min")
    maximum: int | float | None = Field(default=None, alias="max")
    regex: str | None = Field(default=None, description="Pattern values must match")
    format: FieldFormat | None = Field(default=None, description="Well-known format")

    @field_validator("declared_type")
    @classmethod
    def check_known_type(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if types.declared_families(v) is None:
            known = ", ".join(sorted(types.DECLARED_TYPES))
            raise ValueError(f"unknown type '{v}' (expected one of: {known})")
        return types.normalize_declared(v)

    @field_validator("regex")
    @classmethod
    def check_regex_compiles(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"invalid regex '{v}': {e}") from e
        return v

    @field_validator("minimum", "maximum")
    @classmethod
    def check_finite_bound(cls, v: int | float | None) -> int | float | None:
        if v is not None and not math.isfinite(v):
            raise ValueError(f"bound must be a finite number, got {v}")
        return v

    @model_validator(mode="after")
    def check_constraints_match_type(self) -> "FieldRule":
        declared = self.declared_type
        has_range = self.minimum is not None or self.maximum is not None

        if has_range and declared is not None and declared not in types.ORDERED_TYPES:
            raise ValueError(
                f"field '{self.field}': min/max require a numeric type, not '{declared}'"
            )
        if (
            self.minimum is not None
            and self.maximum is not None
            and self.minimum > self.maximum
        ):
            raise ValueError(f"field '{self.field}': min is greater than max")

        if self.allowed is not None:
            if not self.allowed:
                raise ValueError(f"field '{self.field}': enum must not be empty")
            if declared is not None and declared not in types.TEXT_TYPES:
                raise ValueError(
                    f"field '{self.field}': enum requires a string type, not '{declared}'"
                )

        if self.regex is not None and self.format is not None:
            raise ValueError(f"field '{self.field}': regex and format are exclusive")
        if (self.regex is not None or self.format is not None) and (
            declared is not None and declared not in types.TEXT_TYPES
        ):
            raise ValueError(
                f"field '{self.field}': regex/format require a string type, not '{declared}'"
            )
        return self

    @property
    def pattern(self) -> str | None:
        """Regular expression to enforce, from ``regex`` or ``format``."""
        if self.regex is not None:
            return self.regex
        if self.format is not None:
            return FORMAT_PATTERNS[self.format]
        return None

    @property
    def has_range(self) -> bool:
        return self.minimum is not None or self.maximum is not None


class SchemaDefinition(BaseModel):
    """Declared structure of one table."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rules: tuple[FieldRule, ...] = Field(..., description="Field rules in declared order")
    strict_mode: bool = Field(
        default=False,
        description="Columns absent from the schema fail the run",
    )
    case_insensitive: bool = Field(
        default=False,
        description="Match field names to columns ignoring case",
    )
    table: str | None = Field(
        default=None,
        description="Table to validate when the source holds several",
    )

    @model_validator(mode="after")
    def check_unique_fields(self) -> "SchemaDefinition":
        seen: dict[str, str] = {}
        for rule in self.rules:
            key = self.field_key(rule.field)
            if key in seen:
                raise ValueError(
                    f"duplicate field '{rule.field}' (conflicts with '{seen[key]}')"
                )
            seen[key] = rule.field
        return self

    def field_key(self, name: str) -> str:
        """Key used to compare field names with column names."""
        return name.casefold() if self.case_insensitive else name

    @property
    def field_names(self) -> list[str]:
        return [rule.field for rule in self.rules]

    def get_rule(self, name: str) -> FieldRule | None:
        """Get a field rule by name."""
        key = self.field_key(name)
        for rule in self.rules:
            if self.field_key(rule.field) == key:
                return rule
        return None
