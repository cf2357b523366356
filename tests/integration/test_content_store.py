"""Integration tests for the SQLite content store."""

import sqlite3
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

from termrank.store import ConnectionError, ContentStore
from termrank.store.migrations import CURRENT_VERSION

from tests.helpers.content import insert_term


@pytest.fixture
def temp_db_path() -> Generator[Path]:
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "content.sqlite"


@pytest.fixture
def store(temp_db_path: Path) -> Generator[ContentStore]:
    """Create a connected content store."""
    store = ContentStore(temp_db_path, request_id="test-request-001")
    store.connect()
    yield store
    store.close()


class TestContentStoreConnection:
    """Tests for store connection and setup."""

    def test_connect_creates_database(self, temp_db_path: Path) -> None:
        """Test connecting creates the database file."""
        store = ContentStore(temp_db_path)
        assert not temp_db_path.exists()

        store.connect()
        assert temp_db_path.exists()
        store.close()

    def test_connect_creates_parent_dirs(self, temp_db_path: Path) -> None:
        """Test connecting creates parent directories."""
        nested_path = temp_db_path.parent / "subdir" / "content.sqlite"
        store = ContentStore(nested_path)
        store.connect()
        assert nested_path.exists()
        store.close()

    def test_context_manager(self, temp_db_path: Path) -> None:
        """Test store works as context manager."""
        with ContentStore(temp_db_path) as store:
            assert store.is_connected
            assert store.get_schema_version() == CURRENT_VERSION

        assert not store.is_connected

    def test_in_memory(self) -> None:
        """The :memory: path works without touching the filesystem."""
        with ContentStore(":memory:") as store:
            assert store.get_schema_version() == CURRENT_VERSION

    def test_reconnect_keeps_schema(self, temp_db_path: Path) -> None:
        """Reopening an existing database applies no migrations twice."""
        with ContentStore(temp_db_path) as store:
            insert_term(store, 1)
        with ContentStore(temp_db_path) as store:
            assert store.query("SELECT COUNT(*) AS n FROM terms") == [{"n": 1}]

    def test_not_connected(self, temp_db_path: Path) -> None:
        """Using the store before connect() raises ConnectionError."""
        store = ContentStore(temp_db_path)
        with pytest.raises(ConnectionError):
            store.query("SELECT 1")
        with pytest.raises(ConnectionError):
            store.execute("DELETE FROM terms")


class TestQueryAndExecute:
    """Tests for the parameterized query interface."""

    def test_query_returns_dicts(self, store: ContentStore) -> None:
        """Rows come back keyed by column name."""
        insert_term(store, 7, likes=3, views=9, category_id=2)
        rows = store.query(
            "SELECT id, likes_count, views, category_id FROM terms WHERE id = ?", (7,)
        )
        assert rows == [{"id": 7, "likes_count": 3, "views": 9, "category_id": 2}]

    def test_execute_returns_rowcount(self, store: ContentStore) -> None:
        """Writes report affected rows."""
        insert_term(store, 1)
        insert_term(store, 2)
        changed = store.execute("UPDATE terms SET views = ? WHERE id > ?", (5, 0))
        assert changed == 2

    def test_values_are_bound(self, store: ContentStore) -> None:
        """Quotes inside parameters are data, not SQL."""
        store.execute(
            "INSERT INTO user_specialties (user_id, specialty) VALUES (?, ?)",
            (1, "law'; DROP TABLE terms; --"),
        )
        rows = store.query("SELECT specialty FROM user_specialties")
        assert rows == [{"specialty": "law'; DROP TABLE terms; --"}]
        assert store.query("SELECT COUNT(*) AS n FROM terms") == [{"n": 0}]

    def test_sql_errors_propagate(self, store: ContentStore) -> None:
        """Driver errors are not wrapped."""
        with pytest.raises(sqlite3.OperationalError):
            store.query("SELECT missing_column FROM terms")

    def test_transaction_rolls_back(self, store: ContentStore) -> None:
        """A failing transaction leaves no partial writes."""
        with pytest.raises(sqlite3.IntegrityError):
            with store.transaction("seed") as conn:
                conn.execute(
                    "INSERT INTO user_specialties (user_id, specialty) VALUES (?, ?)",
                    (1, "law"),
                )
                conn.execute(
                    "INSERT INTO user_specialties (user_id, specialty) VALUES (?, ?)",
                    (1, "law"),
                )

        assert store.query("SELECT * FROM user_specialties") == []


class TestResetSchema:
    """Tests for reset_schema."""

    def test_reset_discards_content(self, store: ContentStore) -> None:
        """Resetting leaves an empty database at the current version."""
        insert_term(store, 1)
        insert_term(store, 2)

        applied = store.reset_schema()

        assert applied == [CURRENT_VERSION]
        assert store.get_schema_version() == CURRENT_VERSION
        assert store.query("SELECT COUNT(*) AS n FROM terms") == [{"n": 0}]
