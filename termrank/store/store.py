"""SQLite content store implementation."""

import sqlite3
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from termrank.config.constants import COMPONENT_STORE
from termrank.store.errors import ConnectionError as StoreConnectionError
from termrank.store.migrations import MigrationManager
from termrank.store.protocols import Params, Row


logger = structlog.get_logger()

MEMORY_PATH = ":memory:"


def _elapsed_ms(start_ns: int) -> float:
    return round((time.perf_counter_ns() - start_ns) / 1_000_000, 2)


class ContentStore:
    """QueryExecutor backed by a single SQLite connection.

    Reads return plain dicts, so the ranker never sees sqlite3.Row. Writes
    exist for seeding and maintenance and go through execute() or
    transaction().
    """

    def __init__(self, db_path: Path | str, request_id: str | None = None) -> None:
        """Initialize the content store.

        Args:
            db_path: SQLite file, or ":memory:" for a throwaway database.
            request_id: Request ID attached to this store's log records.
        """
        self._db_path = Path(db_path)
        self._in_memory = str(db_path) == MEMORY_PATH
        self._request_id = request_id or str(uuid.uuid4())
        self._conn: sqlite3.Connection | None = None
        self._log = logger.bind(
            component=COMPONENT_STORE,
            request_id=self._request_id,
            db_path=str(self._db_path),
        )

    @property
    def db_path(self) -> Path:
        """Location of the database."""
        return self._db_path

    @property
    def is_connected(self) -> bool:
        """Whether connect() has been called and close() has not."""
        return self._conn is not None

    def connect(self) -> None:
        """Open the database, creating it if needed, and migrate the schema.

        Calling connect() on an open store does nothing.
        """
        if self._conn is not None:
            return

        if not self._in_memory:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)

        start_ns = time.perf_counter_ns()
        conn = sqlite3.connect(MEMORY_PATH if self._in_memory else self._db_path)
        conn.row_factory = sqlite3.Row

        try:
            conn.execute("PRAGMA foreign_keys=ON")
            manager = MigrationManager(conn)
            schema_version = manager.get_current_version()
            applied = manager.apply_migrations()
        except Exception:
            conn.close()
            raise

        self._conn = conn
        self._log.info(
            "database_connected",
            schema_version=schema_version,
            migrations_applied=applied,
            duration_ms=_elapsed_ms(start_ns),
        )

    def close(self) -> None:
        """Close the connection; safe to call more than once."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        self._log.debug("database_closed")

    def __enter__(self) -> "ContentStore":
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()

    def _require_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreConnectionError("Database not connected. Call connect() first.")
        return self._conn

    def query(self, sql: str, params: Params = ()) -> list[Row]:
        """Run a read statement.

        Args:
            sql: Statement with ``?`` placeholders.
            params: Positional parameters.

        Returns:
            Rows as dicts keyed by column name.
        """
        conn = self._require_connection()
        start_ns = time.perf_counter_ns()
        rows = [dict(row) for row in conn.execute(sql, tuple(params)).fetchall()]
        self._log.debug(
            "query_complete", row_count=len(rows), duration_ms=_elapsed_ms(start_ns)
        )
        return rows

    def execute(self, sql: str, params: Params = ()) -> int:
        """Run one write statement in its own transaction.

        Returns:
            Number of affected rows.
        """
        with self.transaction("execute") as conn:
            return conn.execute(sql, tuple(params)).rowcount

    @contextmanager
    def transaction(self, operation: str) -> Iterator[sqlite3.Connection]:
        """Commit the block's writes together, or roll them all back.

        Args:
            operation: Label for the log records.

        Yields:
            The underlying connection.
        """
        conn = self._require_connection()
        log = self._log.bind(tx_id=uuid.uuid4().hex[:8], op=operation)
        start_ns = time.perf_counter_ns()

        try:
            yield conn
        except Exception:
            conn.rollback()
            log.warning("transaction_rolled_back", duration_ms=_elapsed_ms(start_ns))
            raise

        conn.commit()
        log.debug("transaction_committed", duration_ms=_elapsed_ms(start_ns))

    def reset_schema(self) -> list[int]:
        """Drop every table and migrate again, leaving an empty database.

        Returns:
            Versions re-applied after the rollback.
        """
        manager = MigrationManager(self._require_connection())
        reverted = manager.rollback_to(0)
        applied = manager.apply_migrations()
        self._log.warning("schema_reset", reverted=reverted, applied=applied)
        return applied

    def get_schema_version(self) -> int:
        """Schema version of the open database."""
        return MigrationManager(self._require_connection()).get_current_version()
