"""🔌 Data source adapter contract.

The validation core never writes SQL for a specific engine. A source declares
what it can do through its capability profile, and renders the planner's
dialect-neutral pushdown units itself. Adding a source type means
implementing this one interface.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Iterator, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ..errors import SourceConnectionError

if TYPE_CHECKING:
    from ..planner.units import QueryUnit

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Output column holding the scanned row count in pushdown results
TOTAL_ROWS_ALIAS = "total_rows"


class DataSourceCapabilities(BaseModel):
    """What a source can execute natively. Fixed for the lifetime of a run."""

    model_config = ConfigDict(frozen=True)

    supports_pushdown: bool = Field(
        default=False,
        description="Row checks can run as native aggregate queries",
    )
    supports_enum_native_type: bool = Field(
        default=False,
        description="Enum-typed columns compare against text literals without a cast",
    )
    supports_regex: bool = Field(
        default=False,
        description="Regular expressions can be evaluated natively",
    )
    max_batch_size: int = Field(
        default=64,
        ge=1,
        description="Maximum checks combined into one pushdown query",
    )
    thread_safe: bool = Field(
        default=False,
        description="The session may be shared by concurrent query units",
    )


class DataSourceAdapter(ABC):
    """A live tabular source the engine validates against.

    Subclasses implement ``_open`` and the query methods. ``connect`` wraps
    ``_open`` with bounded retries and exponential backoff, and converts any
    final failure into ``SourceConnectionError``.
    """

    def __init__(self, connect_retries: int = 3, connect_backoff: float = 0.5) -> None:
        self.connect_retries = connect_retries
        self.connect_backoff = connect_backoff
        self._connected = False

    @abstractmethod
    def capabilities(self) -> DataSourceCapabilities:
        """Declare the source's capability profile."""

    @abstractmethod
    def columns(self, table: str | None = None) -> list[tuple[str, str]]:
        """Return ordered (name, native type) pairs for the table."""

    @abstractmethod
    def stream_rows(
        self,
        columns: list[str],
        table: str | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Lazily yield rows restricted to ``columns``."""

    def run_pushdown(self, unit: "QueryUnit") -> list[dict[str, Any]]:
        """Execute a pushdown unit natively and return its result rows.

        The single result row maps each measure alias to its violation count
        and ``total_rows`` to the number of rows scanned.
        """
        raise NotImplementedError(f"{type(self).__name__} does not support pushdown")

    @abstractmethod
    def _open(self) -> None:
        """Acquire the underlying connection or file handle."""

    def _close(self) -> None:
        """Release the underlying connection."""

    def connect(self) -> None:
        """Open the source, retrying transient failures.

        Raises:
            SourceConnectionError: If the source is still unreachable after
                ``connect_retries`` retries
        """
        if self._connected:
            return
        self._with_retries(self._open)
        self._connected = True

    def close(self) -> None:
        if self._connected:
            self._close()
            self._connected = False

    def _with_retries(self, operation: Callable[[], T]) -> T:
        attempts = self.connect_retries + 1
        attempt = 0
        while True:
            attempt += 1
            try:
                return operation()
            except SourceConnectionError:
                raise
            except Exception as e:
                if attempt == attempts:
                    raise SourceConnectionError(
                        f"{self!r}: cannot connect after {attempts} attempt(s): {e}"
                    ) from e
                delay = self.connect_backoff * (2 ** (attempt - 1))
                logger.warning(
                    "Connection attempt %d/%d to %r failed (%s), retrying in %.2fs",
                    attempt,
                    attempts,
                    self,
                    e,
                    delay,
                )
                time.sleep(delay)

    def __enter__(self) -> "DataSourceAdapter":
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
