"""🧪 Tests for the execution engine."""

import pytest

from schemadrift.checks import decompose
from schemadrift.config import EngineConfig
from schemadrift.engine import ExecutionEngine
from schemadrift.errors import SourceConnectionError
from schemadrift.planner import QueryUnit, UnitKind, plan
from schemadrift.sources.base import DataSourceCapabilities

PUSHDOWN = DataSourceCapabilities(
    supports_pushdown=True,
    supports_regex=True,
    thread_safe=True,
)


def run(schema, source, config=None, case_insensitive=False):
    units = plan(decompose(schema), source.capabilities())
    engine = ExecutionEngine(config, case_insensitive=case_insensitive)
    return engine.execute(units, source)


class TestExecutionEngine:
    """Tests for ExecutionEngine.execute()."""

    def test_happy_path(self, users_schema, users_columns, users_rows, make_source):
        """Test metadata and pushdown units both complete."""
        source = make_source(users_columns, users_rows)

        results = run(users_schema, source)

        assert set(results) == {"metadata", "pushdown_0"}
        assert results["metadata"].columns == users_columns
        pushdown = results["pushdown_0"]
        assert pushdown.ok
        assert pushdown.total_rows == 3
        assert set(pushdown.violations.values()) == {0}
        assert len(pushdown.check_ids) == 6

    def test_local_scan(self, users_schema, users_columns, users_rows, make_source):
        """Test capability-less sources are evaluated locally."""
        source = make_source(users_columns, users_rows, capabilities=DataSourceCapabilities())

        results = run(users_schema, source)

        assert set(results) == {"metadata", "local_scan"}
        assert results["local_scan"].total_rows == 3
        assert source.pushdowns == []

    def test_failed_unit_is_isolated(self, users_schema, users_columns, users_rows, make_source):
        """Test a failing batch does not affect its siblings."""
        source = make_source(
            users_columns,
            users_rows,
            capabilities=PUSHDOWN.model_copy(update={"max_batch_size": 3}),
            fail_units=("pushdown_0",),
        )

        results = run(users_schema, source)

        failed = results["pushdown_0"]
        assert not failed.ok
        assert failed.error.unit_id == "pushdown_0"
        assert "malformed batch" in str(failed.error)
        assert failed.check_ids == (
            "user_id:NOT_NULL",
            "user_id:RANGE",
            "email:NOT_NULL",
        )
        assert results["pushdown_1"].ok
        assert results["metadata"].ok

    def test_timeout_fails_only_that_unit(
        self, users_schema, users_columns, users_rows, make_source
    ):
        """Test a unit running past its timeout resolves to an error."""
        source = make_source(
            users_columns,
            users_rows,
            capabilities=PUSHDOWN.model_copy(update={"max_batch_size": 3}),
            delays={"pushdown_1": 0.5},
        )
        config = EngineConfig(unit_timeout=0.1, poll_interval=0.01)

        results = run(users_schema, source, config)

        assert results["pushdown_0"].ok
        assert not results["pushdown_1"].ok
        assert "timed out after 0.1s" in str(results["pushdown_1"].error)

    def test_connection_loss_is_fatal(
        self, users_schema, users_columns, users_rows, make_source
    ):
        """Test a lost connection aborts the run."""
        source = make_source(
            users_columns,
            users_rows,
            connection_lost_units=("pushdown_0",),
        )

        with pytest.raises(SourceConnectionError, match="connection reset"):
            run(users_schema, source)

    def test_metadata_failure_fails_row_units(
        self, users_schema, users_columns, users_rows, make_source
    ):
        """Test row units are not dispatched without column metadata."""
        source = make_source(users_columns, users_rows, fail_columns=True)

        results = run(users_schema, source)

        assert "catalog unavailable" in str(results["metadata"].error)
        assert "column metadata unavailable" in str(results["pushdown_0"].error)
        assert source.pushdowns == []

    def test_absent_columns_are_dropped_from_batches(
        self, users_schema, users_columns, users_rows, make_source
    ):
        """Test a missing column does not poison the batch it was planned in."""
        columns = [column for column in users_columns if column[0] != "age"]
        source = make_source(columns, users_rows)

        results = run(users_schema, source)

        pushdown = results["pushdown_0"]
        assert pushdown.ok
        assert "age:RANGE" in pushdown.check_ids
        assert "age:RANGE" not in pushdown.violations
        assert "age" not in source.pushdowns[0].columns

    def test_case_insensitive_binding(self, users_schema, make_source):
        """Test measures are rebound to the source's own column names."""
        columns = [
            ("USER_ID", "INTEGER"),
            ("Email", "VARCHAR"),
            ("User_Tier", "VARCHAR"),
            ("AGE", "INTEGER"),
        ]
        rows = [{"USER_ID": 1, "Email": "a@b.io", "User_Tier": "VIP", "AGE": 5}]
        source = make_source(columns, rows)

        results = run(users_schema, source, case_insensitive=True)

        assert source.pushdowns[0].columns == ["USER_ID", "Email", "User_Tier", "AGE"]
        assert results["pushdown_0"].violations["user_tier:ENUM"] == 1

    def test_non_thread_safe_source_is_serialized(
        self, users_schema, users_columns, users_rows, make_source
    ):
        """Test units never overlap on a source that cannot share its session."""
        source = make_source(
            users_columns,
            users_rows,
            capabilities=PUSHDOWN.model_copy(
                update={"max_batch_size": 1, "thread_safe": False}
            ),
            delays={f"pushdown_{i}": 0.02 for i in range(6)},
        )

        results = run(users_schema, source, EngineConfig(max_workers=4))

        assert len(source.pushdowns) == 6
        assert source.max_active == 1
        assert all(result.ok for result in results.values())

    def test_thread_safe_source_runs_concurrently(
        self, users_schema, users_columns, users_rows, make_source
    ):
        source = make_source(
            users_columns,
            users_rows,
            capabilities=PUSHDOWN.model_copy(update={"max_batch_size": 1}),
            delays={f"pushdown_{i}": 0.1 for i in range(6)},
        )

        run(users_schema, source, EngineConfig(max_workers=4))

        assert source.max_active > 1

    def test_unsatisfiable_dependencies(self, users_columns, make_source):
        unit = QueryUnit(
            unit_id="orphan",
            kind=UnitKind.PUSHDOWN,
            check_ids=(),
            depends_on=("ghost",),
        )

        with pytest.raises(ValueError, match="ghost"):
            ExecutionEngine().execute([unit], make_source(users_columns))

    def test_waiting_for_session_does_not_count_towards_timeout(
        self, users_schema, users_columns, users_rows, make_source
    ):
        """Test queued units on a serialized source keep their own timeout."""
        source = make_source(
            users_columns,
            users_rows,
            capabilities=PUSHDOWN.model_copy(
                update={"max_batch_size": 1, "thread_safe": False}
            ),
            delays={f"pushdown_{i}": 0.15 for i in range(6)},
        )
        config = EngineConfig(max_workers=4, unit_timeout=0.4, poll_interval=0.01)

        results = run(users_schema, source, config)

        errors = {uid: str(r.error) for uid, r in results.items() if not r.ok}
        assert errors == {}
        assert len(source.pushdowns) == 6
