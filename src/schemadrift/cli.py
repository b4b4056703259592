#!/usr/bin/env python3
"""
🔎 schemadrift CLI - validate a data source against a declared schema.

Usage:
    schemadrift validate <schema> <source>     Validate and report
    schemadrift --help                          Show help

Exit codes:
    0  no drift
    1  drift detected or checks could not be evaluated
    2  fatal error (invalid schema, unreachable source)
"""

import argparse
import sys
from pathlib import Path

from schemadrift import __version__


def run_validation(
    schema_path: Path,
    source_path: Path,
    table: str | None = None,
    engine: str = "duckdb",
    sheet: str | None = None,
    output: str = "console",
    verbose: bool = False,
    max_workers: int | None = None,
    timeout: float | None = None,
) -> int:
    """Validate a source and return the process exit code.

    Args:
        schema_path: JSON or YAML schema definition
        source_path: DuckDB database or flat file
        table: Table name inside a database
        engine: duckdb (pushdown) or pandas (local evaluation)
        sheet: Sheet name for Excel sources
        output: Output format (console, json)
        verbose: Show every check, not just failures
        max_workers: Override concurrent query units
        timeout: Override per-unit timeout in seconds
    """
    from schemadrift.config import EngineConfig, get_settings
    from schemadrift.errors import FatalError
    from schemadrift.log import setup_logging
    from schemadrift.report.exit_codes import exit_code, exit_code_for_error
    from schemadrift.reporters.console import ConsoleReporter
    from schemadrift.reporters.json import JSONReporter
    from schemadrift.schema.loader import load_schema
    from schemadrift.sources.factory import open_source
    from schemadrift.validator import SchemaValidator

    settings = get_settings()
    setup_logging("DEBUG" if verbose else settings.log_level)

    # Select reporter
    if output == "json":
        reporter = JSONReporter(pretty=verbose)
    else:
        reporter = ConsoleReporter(verbose=verbose)

    overrides = {"max_workers": max_workers, "unit_timeout": timeout}
    try:
        config = EngineConfig.model_validate(
            {
                **settings.engine_config().model_dump(),
                **{key: value for key, value in overrides.items() if value is not None},
            }
        )
        schema = load_schema(schema_path)
        source = open_source(
            source_path,
            table=table or schema.table,
            engine=engine,
            sheet=sheet,
            settings=settings,
        )
        report = SchemaValidator(schema, source, config, reporter).run()
    except (FatalError, ValueError) as e:
        reporter.report_error(str(e))
        return int(exit_code_for_error(e))

    return int(exit_code(report))


def main() -> None:
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="schemadrift",
        description="🔎 Validate data sources against declared schemas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  schemadrift validate users.json users.parquet
  schemadrift validate users.yaml warehouse.duckdb --table users
  schemadrift validate users.json export.xlsx --engine pandas --sheet 2024
  schemadrift validate users.json users.csv -o json > report.json
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    validate_parser = subparsers.add_parser(
        "validate", help="Validate a source against a schema"
    )
    validate_parser.add_argument("schema", type=Path, help="Schema definition (JSON or YAML)")
    validate_parser.add_argument("source", type=Path, help="DuckDB database or data file")
    validate_parser.add_argument("--table", "-t", help="Table to validate in a database")
    validate_parser.add_argument(
        "--engine",
        "-e",
        choices=["duckdb", "pandas"],
        default="duckdb",
        help="duckdb pushes checks down, pandas evaluates locally (default: duckdb)",
    )
    validate_parser.add_argument("--sheet", help="Sheet name for Excel sources")
    validate_parser.add_argument(
        "--output",
        "-o",
        choices=["console", "json"],
        default="console",
        help="Output format (default: console)",
    )
    validate_parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show every check"
    )
    validate_parser.add_argument(
        "--max-workers", type=int, help="Concurrent query units"
    )
    validate_parser.add_argument(
        "--timeout", type=float, help="Per-unit timeout in seconds"
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = parser.parse_args()

    if args.command == "validate":
        sys.exit(
            run_validation(
                schema_path=args.schema,
                source_path=args.source,
                table=args.table,
                engine=args.engine,
                sheet=args.sheet,
                output=args.output,
                verbose=args.verbose,
                max_workers=args.max_workers,
                timeout=args.timeout,
            )
        )
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
