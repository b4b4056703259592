"""🔌 Data source adapters."""

from .base import DataSourceAdapter, DataSourceCapabilities
from .duckdb import DuckDBSource
from .factory import open_source
from .frame import FrameSource

__all__ = [
    "DataSourceAdapter",
    "DataSourceCapabilities",
    "DuckDBSource",
    "FrameSource",
    "open_source",
]
