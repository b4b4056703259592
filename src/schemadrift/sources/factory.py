"""Pick a source adapter for a location."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from ..config import Settings
from .base import DataSourceAdapter
from .duckdb import DuckDBSource
from .frame import FrameSource
from .loader import SUPPORTED_SUFFIXES

DATABASE_SUFFIXES = (".duckdb", ".db", ".ddb")


def open_source(
    location: str | Path,
    table: str | None = None,
    engine: Literal["duckdb", "pandas"] = "duckdb",
    sheet: str | None = None,
    settings: Settings | None = None,
) -> DataSourceAdapter:
    """Build the adapter for a database file or a flat file.

    Args:
        location: DuckDB database file, or a CSV/JSON/Parquet/Excel file
        table: Table to validate inside a database
        engine: ``duckdb`` pushes checks down, ``pandas`` evaluates locally
        sheet: Sheet name for Excel files
        settings: Settings override (default: from environment)

    Returns:
        An unconnected adapter
    """
    path = Path(location)
    suffix = path.suffix.lower()

    if suffix in DATABASE_SUFFIXES:
        if engine != "duckdb":
            raise ValueError(f"Database files require the duckdb engine: {path}")
        if not table:
            raise ValueError(f"A table name is required for database {path}")
        return DuckDBSource(database=path, table=table, settings=settings)

    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported source format: {suffix or path.name}")

    if engine == "pandas":
        return FrameSource(file=path, sheet=sheet, settings=settings)
    return DuckDBSource(file=path, table=table, sheet=sheet, settings=settings)
