"""Read flat files for validation.

Two paths, one per adapter:
- DuckDB views over native readers (CSV, JSON, Parquet), so pushdown queries
  scan the file directly. Excel goes through a pandas bridge.
- pandas DataFrames for the local-evaluation adapter.

Supported formats:
- CSV (.csv)
- JSON (.json) - array of records, or newline-delimited (.jsonl/.ndjson)
- Parquet (.parquet)
- Excel (.xlsx, .xls) - requires openpyxl
"""

from __future__ import annotations

import re
from pathlib import Path

import duckdb
import pandas as pd

SUPPORTED_SUFFIXES = (".csv", ".json", ".jsonl", ".ndjson", ".parquet", ".xlsx", ".xls")


def quote_ident(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def view_name_for(file_path: Path) -> str:
    """Convert a file name to a valid SQL identifier.

    e.g., 'raw-users.2024.csv' -> 'raw_users_2024'
    """
    return re.sub(r"[^a-zA-Z0-9_]", "_", file_path.stem)


def register_file(
    conn: duckdb.DuckDBPyConnection,
    file_path: Path,
    view_name: str | None = None,
    sheet: str | None = None,
) -> str:
    """Expose a file as a DuckDB view and return the view name.

    Uses DuckDB native readers where possible so the file is scanned lazily.
    """
    suffix = file_path.suffix.lower()
    name = view_name or view_name_for(file_path)
    path_literal = quote_literal(str(file_path))

    if suffix == ".csv":
        reader = f"read_csv_auto({path_literal})"
    elif suffix in (".json", ".jsonl", ".ndjson"):
        reader = f"read_json_auto({path_literal})"
    elif suffix == ".parquet":
        reader = f"read_parquet({path_literal})"
    elif suffix in (".xlsx", ".xls"):
        return _register_excel(conn, file_path, name, sheet)
    else:
        raise ValueError(f"Unsupported file format: {suffix}")

    conn.execute(f"CREATE OR REPLACE VIEW {quote_ident(name)} AS SELECT * FROM {reader}")
    return name


def _register_excel(
    conn: duckdb.DuckDBPyConnection,
    file_path: Path,
    name: str,
    sheet: str | None = None,
) -> str:
    """Load Excel file - requires pandas bridge (no native DuckDB support)."""
    df = read_frame(file_path, sheet=sheet)

    # Register pandas DataFrame and materialize it under the view name
    conn.register("_temp_excel", df)
    conn.execute(f"CREATE OR REPLACE TABLE {quote_ident(name)} AS SELECT * FROM _temp_excel")
    conn.unregister("_temp_excel")
    return name


def read_frame(file_path: Path, sheet: str | None = None) -> pd.DataFrame:
    """Read a file into a pandas DataFrame."""
    suffix = file_path.suffix.lower()

    if suffix == ".csv":
        return pd.read_csv(file_path)
    if suffix == ".json":
        return pd.read_json(file_path, orient="records")
    if suffix in (".jsonl", ".ndjson"):
        return pd.read_json(file_path, orient="records", lines=True)
    if suffix == ".parquet":
        return pd.read_parquet(file_path)
    if suffix in (".xlsx", ".xls"):
        xlsx = pd.ExcelFile(file_path)
        sheet_name = sheet or xlsx.sheet_names[0]
        if sheet_name not in xlsx.sheet_names:
            raise ValueError(f"Sheet '{sheet_name}' not found in {file_path}")
        return xlsx.parse(sheet_name)
    raise ValueError(f"Unsupported file format: {suffix}")
