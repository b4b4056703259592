"""📋 Schema model - declared expectations and how they are loaded."""

from .loader import load_schema, parse_schema
from .models import FORMAT_PATTERNS, FieldFormat, FieldRule, SchemaDefinition

__all__ = [
    "FORMAT_PATTERNS",
    "FieldFormat",
    "FieldRule",
    "SchemaDefinition",
    "load_schema",
    "parse_schema",
]
