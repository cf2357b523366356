"""SQLite content store consumed read-only by the ranker.

This module provides:
- The QueryExecutor interface (parameterized query/execute)
- A SQLite implementation with schema migrations
- Timestamp encoding shared by writers and the ranker
"""

from termrank.store.errors import ConnectionError, ContentStoreError, MigrationError
from termrank.store.protocols import Params, QueryExecutor, Row
from termrank.store.store import ContentStore
from termrank.store.timestamps import ensure_utc, format_timestamp, parse_timestamp


__all__ = [
    # Errors
    "ConnectionError",
    "ContentStoreError",
    "MigrationError",
    # Interface
    "Params",
    "QueryExecutor",
    "Row",
    # Store
    "ContentStore",
    # Timestamps
    "ensure_utc",
    "format_timestamp",
    "parse_timestamp",
]
