"""🦆 DuckDB source - pushdown validation for databases and files.

Wraps either a DuckDB database (a file or ``:memory:``) or a flat file
exposed as a view through DuckDB's native readers. Row checks are compiled to
a single conditional-aggregation query per batch:

    SELECT COUNT(*) AS total_rows,
           COUNT(*) FILTER (WHERE "email" IS NULL) AS m0,
           COUNT(*) FILTER (WHERE "tier" IS NOT NULL
                            AND CAST("tier" AS VARCHAR) NOT IN ('FREE', 'PREMIUM')) AS m1
    FROM "users"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterator

import duckdb

from ..checks.models import CheckKind
from ..config import Settings, get_settings
from ..errors import SourceConnectionError
from ..planner.units import Measure, QueryUnit
from .base import TOTAL_ROWS_ALIAS, DataSourceAdapter, DataSourceCapabilities
from .loader import quote_ident, quote_literal, register_file

logger = logging.getLogger(__name__)

FETCH_SIZE = 10_000


class DuckDBSource(DataSourceAdapter):
    """DuckDB-backed source with full pushdown support.

    Example:
        # A table in a DuckDB database
        source = DuckDBSource(database="warehouse.duckdb", table="users")

        # A flat file scanned natively
        source = DuckDBSource(file=Path("exports/users.parquet"))

        with source:
            source.columns()
    """

    def __init__(
        self,
        database: str | Path = ":memory:",
        table: str | None = None,
        file: Path | None = None,
        sheet: str | None = None,
        connection: duckdb.DuckDBPyConnection | None = None,
        max_batch_size: int = 64,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        super().__init__(
            connect_retries=settings.connect_retries,
            connect_backoff=settings.connect_backoff,
        )
        self.database = str(database)
        self.table = table
        self.file = file
        self.sheet = sheet
        self.max_batch_size = max_batch_size
        self.settings = settings

        self._conn: duckdb.DuckDBPyConnection | None = connection
        self._owns_connection = connection is None

    @property
    def conn(self) -> duckdb.DuckDBPyConnection:
        """Get the DuckDB connection, opening the source if needed."""
        if self._conn is None:
            self.connect()
        assert self._conn is not None
        return self._conn

    def capabilities(self) -> DataSourceCapabilities:
        # Each call works on its own cursor, so units may share the database
        return DataSourceCapabilities(
            supports_pushdown=True,
            supports_enum_native_type=False,
            supports_regex=True,
            max_batch_size=self.max_batch_size,
            thread_safe=True,
        )

    def _open(self) -> None:
        if self._conn is None:
            read_only = self.database != ":memory:" and self.file is None
            self._conn = duckdb.connect(self.database, read_only=read_only)
            for key, value in self.settings.to_duckdb_settings().items():
                self._conn.execute(f"SET {key} = {value}")

        if self.file is not None:
            if not self.file.exists():
                raise SourceConnectionError(f"File not found: {self.file}")
            view = register_file(self._conn, self.file, self.table, self.sheet)
            self.table = view

    def _close(self) -> None:
        if self._conn is not None and self._owns_connection:
            self._conn.close()
            self._conn = None

    def columns(self, table: str | None = None) -> list[tuple[str, str]]:
        sql = f"DESCRIBE SELECT * FROM {self._table_ref(table)}"
        rows = self._run(lambda cursor: cursor.execute(sql).fetchall())
        return [(str(row[0]), str(row[1])) for row in rows]

    def run_pushdown(self, unit: QueryUnit) -> list[dict[str, Any]]:
        sql = self.compile(unit)
        logger.debug("Pushdown %s: %s", unit.unit_id, sql)

        def fetch(cursor: duckdb.DuckDBPyConnection) -> list[dict[str, Any]]:
            result = cursor.execute(sql)
            names = [desc[0] for desc in result.description]
            return [dict(zip(names, row)) for row in result.fetchall()]

        return self._run(fetch)

    def stream_rows(
        self,
        columns: list[str],
        table: str | None = None,
    ) -> Iterator[dict[str, Any]]:
        select = ", ".join(quote_ident(column) for column in columns) or "*"
        cursor = self.conn.cursor()
        try:
            result = cursor.execute(f"SELECT {select} FROM {self._table_ref(table)}")
            names = [desc[0] for desc in result.description]
            while True:
                batch = result.fetchmany(FETCH_SIZE)
                if not batch:
                    break
                for row in batch:
                    yield dict(zip(names, row))
        finally:
            cursor.close()

    def compile(self, unit: QueryUnit) -> str:
        """Render a pushdown unit as one conditional-aggregation query."""
        selects = [f"COUNT(*) AS {TOTAL_ROWS_ALIAS}"]
        for measure in unit.measures:
            condition = _CONDITIONS[measure.kind](measure)
            selects.append(f"COUNT(*) FILTER (WHERE {condition}) AS {quote_ident(measure.alias)}")
        return f"SELECT {', '.join(selects)} FROM {self._table_ref(unit.table)}"

    def _table_ref(self, table: str | None) -> str:
        name = table or self.table
        if not name:
            raise ValueError("No table given for DuckDB source")
        return ".".join(quote_ident(part) for part in name.split("."))

    def _run(self, operation: Callable[[duckdb.DuckDBPyConnection], Any]) -> Any:
        cursor = self.conn.cursor()
        try:
            return operation(cursor)
        except duckdb.ConnectionException as e:
            raise SourceConnectionError(f"{self!r}: {e}") from e
        finally:
            cursor.close()

    def __repr__(self) -> str:
        target = self.file if self.file is not None else self.database
        return f"DuckDBSource({target}, table={self.table})"


def _not_null(measure: Measure) -> str:
    return f"{quote_ident(measure.column)} IS NULL"


def _enum(measure: Measure) -> str:
    column = quote_ident(measure.column)
    operand = f"CAST({column} AS VARCHAR)" if measure.cast_text else column
    allowed = ", ".join(quote_literal(str(value)) for value in measure.param("values", ()))
    return f"{column} IS NOT NULL AND {operand} NOT IN ({allowed})"


def _range(measure: Measure) -> str:
    column = quote_ident(measure.column)
    number = f"TRY_CAST({column} AS DOUBLE)"
    clauses = [f"{number} IS NULL"]
    if measure.param("min") is not None:
        clauses.append(f"{number} < {float(measure.param('min'))!r}")
    if measure.param("max") is not None:
        clauses.append(f"{number} > {float(measure.param('max'))!r}")
    return f"{column} IS NOT NULL AND ({' OR '.join(clauses)})"


def _regex(measure: Measure) -> str:
    column = quote_ident(measure.column)
    pattern = quote_literal(measure.param("pattern", ""))
    return (
        f"{column} IS NOT NULL AND NOT REGEXP_MATCHES(CAST({column} AS VARCHAR), {pattern})"
    )


_CONDITIONS: dict[CheckKind, Callable[[Measure], str]] = {
    CheckKind.NOT_NULL: _not_null,
    CheckKind.ENUM: _enum,
    CheckKind.RANGE: _range,
    CheckKind.REGEX: _regex,
}
