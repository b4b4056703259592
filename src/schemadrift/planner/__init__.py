"""Query planning - from atomic checks to executable query units."""

from .planner import plan
from .units import ColumnResolver, Measure, QueryUnit, UnitKind

__all__ = ["ColumnResolver", "Measure", "QueryUnit", "UnitKind", "plan"]
