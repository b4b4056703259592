"""🔎 schemadrift - detect drift between a declared schema and a live source.

Quick Start:
    from schemadrift import load_schema, open_source, validate, exit_code

    schema = load_schema("schemas/users.json")
    source = open_source("exports/users.parquet")

    report = validate(schema, source)
    print(report.to_json())
    raise SystemExit(exit_code(report))
"""

__version__ = "0.1.0"

from schemadrift.report import Report, exit_code
from schemadrift.schema import SchemaDefinition, load_schema, parse_schema
from schemadrift.sources import open_source
from schemadrift.validator import SchemaValidator, validate

__all__ = [
    "Report",
    "SchemaDefinition",
    "SchemaValidator",
    "__version__",
    "exit_code",
    "load_schema",
    "open_source",
    "parse_schema",
    "validate",
]
