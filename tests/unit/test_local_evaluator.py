"""🧪 Tests for the local full-scan evaluator."""

import pytest

from schemadrift.checks import CheckKind
from schemadrift.engine import LocalEvaluator
from schemadrift.planner import Measure, QueryUnit, UnitKind


def local_unit(*measures):
    return QueryUnit(
        unit_id="local_scan",
        kind=UnitKind.LOCAL_SCAN,
        check_ids=tuple(measure.check_id for measure in measures),
        measures=measures,
    )


def measure(column, kind, alias="m0", **params):
    return Measure(
        check_id=f"{column}:{kind.value}",
        kind=kind,
        column=column,
        alias=alias,
        params=tuple(params.items()),
    )


class TestLocalEvaluator:
    """Tests for LocalEvaluator."""

    @pytest.fixture
    def source(self, make_source):
        rows = [
            {"tier": "FREE", "age": 30, "email": "a@b.io", "code": None},
            {"tier": "GOLD", "age": -1, "email": "nope", "code": None},
            {"tier": None, "age": "old", "email": None, "code": None},
            {"tier": "GOLD", "age": 200, "email": "c@d.io", "code": None},
            {"tier": "PLATINUM", "age": None, "email": "x y@z.io", "code": None},
        ]
        return make_source(
            columns=[("tier", "VARCHAR"), ("age", "INTEGER"), ("email", "VARCHAR")],
            rows=rows,
        )

    def test_not_null(self, source):
        unit = local_unit(measure("code", CheckKind.NOT_NULL))

        result = LocalEvaluator().evaluate(unit, source)

        assert result.violations == {"code:NOT_NULL": 5}
        assert result.total_rows == 5

    def test_enum_ignores_nulls(self, source):
        unit = local_unit(measure("tier", CheckKind.ENUM, values=("FREE", "PREMIUM")))

        result = LocalEvaluator().evaluate(unit, source)

        assert result.violations == {"tier:ENUM": 3}
        assert result.samples == {"tier:ENUM": ["GOLD", "PLATINUM"]}

    def test_range_counts_non_numeric(self, source):
        """Test values that are not numbers violate RANGE."""
        unit = local_unit(measure("age", CheckKind.RANGE, min=0, max=130))

        result = LocalEvaluator().evaluate(unit, source)

        assert result.violations == {"age:RANGE": 3}
        assert result.samples["age:RANGE"] == ["-1", "old", "200"]

    def test_range_open_bound(self, source):
        unit = local_unit(measure("age", CheckKind.RANGE, min=0, max=None))

        result = LocalEvaluator().evaluate(unit, source)

        assert result.violations == {"age:RANGE": 2}

    def test_regex_uses_search(self, source):
        """Test unanchored patterns match anywhere in the value."""
        unit = local_unit(measure("email", CheckKind.REGEX, pattern="@"))

        result = LocalEvaluator().evaluate(unit, source)

        assert result.violations == {"email:REGEX": 1}
        assert result.samples == {"email:REGEX": ["nope"]}

    def test_all_measures_in_one_pass(self, source):
        """Test every measure is evaluated from a single stream of rows."""
        unit = local_unit(
            measure("tier", CheckKind.ENUM, alias="m0", values=("FREE",)),
            measure("email", CheckKind.REGEX, alias="m1", pattern=r"^[^@\s]+@[^@\s]+$"),
            measure("email", CheckKind.NOT_NULL, alias="m2"),
        )

        result = LocalEvaluator().evaluate(unit, source)

        assert result.violations == {
            "tier:ENUM": 3,
            "email:REGEX": 2,
            "email:NOT_NULL": 1,
        }
        assert result.total_rows == 5

    def test_sample_limit(self, source):
        unit = local_unit(measure("tier", CheckKind.ENUM, values=("FREE",)))

        result = LocalEvaluator(sample_limit=1).evaluate(unit, source)

        assert result.violations == {"tier:ENUM": 3}
        assert result.samples == {"tier:ENUM": ["GOLD"]}

    def test_booleans_are_not_numbers(self, make_source):
        source = make_source(columns=[("flag", "BOOLEAN")], rows=[{"flag": True}])
        unit = local_unit(measure("flag", CheckKind.RANGE, min=0, max=1))

        assert LocalEvaluator().evaluate(unit, source).violations == {"flag:RANGE": 1}

    def test_no_measures(self, source):
        result = LocalEvaluator().evaluate(local_unit(), source)

        assert result.violations == {}
        assert result.total_rows == 0
