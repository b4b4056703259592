"""🐼 pandas source - capability-less flat-file validation.

No pushdown: every row check is evaluated in-process by the local scan
evaluator while rows are streamed from the DataFrame.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator

import pandas as pd

from ..config import Settings, get_settings
from ..errors import SourceConnectionError
from .base import DataSourceAdapter, DataSourceCapabilities
from .loader import read_frame


class FrameSource(DataSourceAdapter):
    """Validate a pandas DataFrame or a file read with pandas.

    Example:
        source = FrameSource(file=Path("exports/users.xlsx"), sheet="2024")
        source = FrameSource(frame=df)
    """

    def __init__(
        self,
        frame: pd.DataFrame | None = None,
        file: Path | None = None,
        sheet: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        if (frame is None) == (file is None):
            raise ValueError("Provide exactly one of 'frame' or 'file'")
        settings = settings or get_settings()
        super().__init__(
            connect_retries=settings.connect_retries,
            connect_backoff=settings.connect_backoff,
        )
        self.file = file
        self.sheet = sheet
        self._frame = frame

    def capabilities(self) -> DataSourceCapabilities:
        return DataSourceCapabilities(thread_safe=True)

    def _open(self) -> None:
        if self._frame is not None:
            return
        assert self.file is not None
        if not self.file.exists():
            raise SourceConnectionError(f"File not found: {self.file}")
        self._frame = read_frame(self.file, sheet=self.sheet)

    @property
    def frame(self) -> pd.DataFrame:
        if self._frame is None:
            self.connect()
        assert self._frame is not None
        return self._frame

    def columns(self, table: str | None = None) -> list[tuple[str, str]]:
        return [(str(name), str(dtype)) for name, dtype in self.frame.dtypes.items()]

    def stream_rows(
        self,
        columns: list[str],
        table: str | None = None,
    ) -> Iterator[dict[str, Any]]:
        subset = self.frame[columns] if columns else self.frame
        names = [str(name) for name in subset.columns]
        for values in subset.itertuples(index=False, name=None):
            yield {name: _clean(value) for name, value in zip(names, values)}

    def __repr__(self) -> str:
        target = self.file if self.file is not None else "<DataFrame>"
        return f"FrameSource({target})"


def _clean(value: Any) -> Any:
    """Turn pandas missing markers (NaN, NaT, pd.NA) into None."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        # Array-like cells are never missing
        pass
    return value
