"""Interface of the relational store consumed by the ranker."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol


Row = Mapping[str, Any]
Params = Sequence[Any]


class QueryExecutor(Protocol):
    """Parameterized read/write primitives of a relational store.

    Implementations must bind params positionally (``?`` placeholders) and
    must never interpolate values into the statement text.

    Timestamp columns hold ISO-8601 text. Writers should store UTC with
    microseconds (see termrank.store.timestamps), which keeps ORDER BY on
    those columns chronological. Activity-window filters compare through
    julianday() and also accept other SQLite date formats and offsets.
    """

    def query(self, sql: str, params: Params = ()) -> list[Row]:
        """Run a read statement and return rows keyed by column name."""
        ...

    def execute(self, sql: str, params: Params = ()) -> int:
        """Run a write statement and return the affected row count."""
        ...
