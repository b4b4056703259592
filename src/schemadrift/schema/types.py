"""Declared and native type families.

Declared types come from the schema file; native types come from the data
source (DuckDB type names or pandas dtypes). Both are folded into a small set
of families before comparison.
"""

from __future__ import annotations

import re

STRING = "string"
INTEGER = "integer"
FLOAT = "float"
BOOLEAN = "boolean"
DATE = "date"
DATETIME = "datetime"

DECLARED_TYPES: dict[str, frozenset[str]] = {
    "string": frozenset({STRING}),
    "text": frozenset({STRING}),
    "enum": frozenset({STRING}),
    "uuid": frozenset({STRING}),
    "email": frozenset({STRING}),
    "integer": frozenset({INTEGER}),
    "int": frozenset({INTEGER}),
    "float": frozenset({FLOAT}),
    "double": frozenset({FLOAT}),
    "number": frozenset({INTEGER, FLOAT}),
    "numeric": frozenset({INTEGER, FLOAT}),
    "decimal": frozenset({INTEGER, FLOAT}),
    "boolean": frozenset({BOOLEAN}),
    "bool": frozenset({BOOLEAN}),
    "date": frozenset({DATE}),
    "datetime": frozenset({DATETIME}),
    "timestamp": frozenset({DATETIME}),
}

ORDERED_TYPES = frozenset(
    name for name, families in DECLARED_TYPES.items() if families <= {INTEGER, FLOAT}
)
TEXT_TYPES = frozenset(
    name for name, families in DECLARED_TYPES.items() if families == {STRING}
)

NATIVE_CANONICAL: dict[str, str] = {
    # DuckDB / SQL
    "varchar": STRING,
    "char": STRING,
    "bpchar": STRING,
    "text": STRING,
    "string": STRING,
    "uuid": STRING,
    "enum": STRING,
    "tinyint": INTEGER,
    "smallint": INTEGER,
    "integer": INTEGER,
    "int": INTEGER,
    "bigint": INTEGER,
    "hugeint": INTEGER,
    "utinyint": INTEGER,
    "usmallint": INTEGER,
    "uinteger": INTEGER,
    "ubigint": INTEGER,
    "real": FLOAT,
    "float": FLOAT,
    "double": FLOAT,
    "double precision": FLOAT,
    "decimal": FLOAT,
    "numeric": FLOAT,
    "boolean": BOOLEAN,
    "bool": BOOLEAN,
    "date": DATE,
    "timestamp": DATETIME,
    "timestamptz": DATETIME,
    "datetime": DATETIME,
    # pandas dtypes
    "object": STRING,
    "str": STRING,
    "category": STRING,
    "int8": INTEGER,
    "int16": INTEGER,
    "int32": INTEGER,
    "int64": INTEGER,
    "uint8": INTEGER,
    "uint16": INTEGER,
    "uint32": INTEGER,
    "uint64": INTEGER,
    "float16": FLOAT,
    "float32": FLOAT,
    "float64": FLOAT,
    "datetime64": DATETIME,
}

_PARAMS = re.compile(r"\(.*\)")


def normalize_declared(value: str) -> str:
    return value.strip().lower()


def declared_families(value: str) -> frozenset[str] | None:
    """Return the native families a declared type accepts, or None if unknown."""
    return DECLARED_TYPES.get(normalize_declared(value))


def native_family(native_type: str) -> str:
    """Fold a DuckDB type name or pandas dtype into a type family.

    Unknown types are returned lower-cased so they can still be reported.

    Examples:
        native_family("DECIMAL(12,2)")            -> "float"
        native_family("TIMESTAMP WITH TIME ZONE") -> "datetime"
        native_family("datetime64[ns, UTC]")      -> "datetime"
        native_family("Int64")                    -> "integer"
    """
    key = native_type.strip().lower()
    if key.endswith("[]"):
        return "list"
    key = _PARAMS.sub("", key).split("[", 1)[0].strip()
    if key.startswith("timestamp"):
        return DATETIME
    if key in NATIVE_CANONICAL:
        return NATIVE_CANONICAL[key]
    return key


def is_compatible(declared: str, native_type: str) -> bool:
    """Check whether a source column's native type satisfies a declared type."""
    families = declared_families(declared)
    if families is None:
        return normalize_declared(declared) == native_family(native_type)
    return native_family(native_type) in families
