"""🧪 Pytest configuration and shared fixtures."""

import threading
import time
from typing import Any, Iterator

import duckdb
import pandas as pd
import pytest

from schemadrift.config import Settings, get_settings
from schemadrift.engine.local import LocalEvaluator
from schemadrift.errors import SourceConnectionError
from schemadrift.planner.units import QueryUnit
from schemadrift.schema import parse_schema
from schemadrift.sources.base import (
    TOTAL_ROWS_ALIAS,
    DataSourceAdapter,
    DataSourceCapabilities,
)


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """No retry delays, fresh settings per test."""
    monkeypatch.setenv("SCHEMADRIFT_CONNECT_RETRIES", "1")
    monkeypatch.setenv("SCHEMADRIFT_CONNECT_BACKOFF", "0")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return Settings(connect_retries=1, connect_backoff=0)


@pytest.fixture
def users_schema_data():
    """Schema for the users table used across tests."""
    return {
        "rules": [
            {"field": "user_id", "type": "integer", "required": True, "min": 1},
            {"field": "email", "type": "string", "required": True, "format": "email"},
            {"field": "user_tier", "type": "string", "enum": ["FREE", "PREMIUM"]},
            {"field": "age", "type": "integer", "min": 0, "max": 130},
        ],
        "strict_mode": False,
        "case_insensitive": False,
    }


@pytest.fixture
def users_schema(users_schema_data):
    return parse_schema(users_schema_data)


@pytest.fixture
def users_rows():
    """Rows that satisfy users_schema."""
    return [
        {"user_id": 1, "email": "ada@example.com", "user_tier": "FREE", "age": 36},
        {"user_id": 2, "email": "alan@example.com", "user_tier": "PREMIUM", "age": 41},
        {"user_id": 3, "email": "grace@example.com", "user_tier": None, "age": None},
    ]


@pytest.fixture
def users_frame(users_rows):
    return pd.DataFrame(users_rows)


@pytest.fixture
def users_connection(users_rows):
    """In-memory DuckDB database with a users table."""
    conn = duckdb.connect(":memory:")
    conn.execute(
        """
        CREATE TABLE users (
            user_id INTEGER,
            email VARCHAR,
            user_tier VARCHAR,
            age INTEGER,
            marketing_consent BOOLEAN
        )
        """
    )
    for row in users_rows:
        conn.execute(
            "INSERT INTO users VALUES (?, ?, ?, ?, ?)",
            [row["user_id"], row["email"], row["user_tier"], row["age"], True],
        )
    yield conn
    conn.close()


class FakeSource(DataSourceAdapter):
    """In-memory adapter with controllable failures and delays."""

    def __init__(
        self,
        columns: list[tuple[str, str]],
        rows: list[dict[str, Any]] | None = None,
        capabilities: DataSourceCapabilities | None = None,
        fail_units: tuple[str, ...] = (),
        connection_lost_units: tuple[str, ...] = (),
        delays: dict[str, float] | None = None,
        refuse_connection: bool = False,
        fail_columns: bool = False,
    ) -> None:
        super().__init__(connect_retries=1, connect_backoff=0)
        self._columns = columns
        self.rows = rows or []
        self._capabilities = capabilities or DataSourceCapabilities(
            supports_pushdown=True,
            supports_regex=True,
            thread_safe=True,
        )
        self.fail_units = fail_units
        self.connection_lost_units = connection_lost_units
        self.delays = delays or {}
        self.refuse_connection = refuse_connection
        self.fail_columns = fail_columns

        self.open_attempts = 0
        self.pushdowns: list[QueryUnit] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def capabilities(self) -> DataSourceCapabilities:
        return self._capabilities

    def _open(self) -> None:
        self.open_attempts += 1
        if self.refuse_connection:
            raise OSError("connection refused")

    def columns(self, table: str | None = None) -> list[tuple[str, str]]:
        if self.fail_columns:
            raise RuntimeError("catalog unavailable")
        return list(self._columns)

    def stream_rows(
        self,
        columns: list[str],
        table: str | None = None,
    ) -> Iterator[dict[str, Any]]:
        for row in self.rows:
            yield {column: row.get(column) for column in columns}

    def run_pushdown(self, unit: QueryUnit) -> list[dict[str, Any]]:
        with self._lock:
            self.pushdowns.append(unit)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            time.sleep(self.delays.get(unit.unit_id, 0.0))
            if unit.unit_id in self.connection_lost_units:
                raise SourceConnectionError("connection reset by peer")
            if unit.unit_id in self.fail_units:
                raise RuntimeError("Binder Error: malformed batch")
            result = LocalEvaluator(sample_limit=0).evaluate(unit, self)
            row = {TOTAL_ROWS_ALIAS: result.total_rows}
            for measure in unit.measures:
                row[measure.alias] = result.violations[measure.check_id]
            return [row]
        finally:
            with self._lock:
                self.active -= 1

    def __repr__(self) -> str:
        return "FakeSource()"


@pytest.fixture
def make_source():
    """Factory for FakeSource adapters."""
    return FakeSource


@pytest.fixture
def users_columns():
    return [
        ("user_id", "INTEGER"),
        ("email", "VARCHAR"),
        ("user_tier", "VARCHAR"),
        ("age", "INTEGER"),
    ]
