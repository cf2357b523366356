"""Versioned schema for the content store.

The schema covers only what the ranking read path needs: terms with their
denormalized counters, like and comment events, follows and specialty tags.
"""

import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from termrank.store.errors import MigrationError
from termrank.store.timestamps import format_timestamp


logger = structlog.get_logger()


@dataclass(frozen=True)
class Migration:
    """One schema step.

    Attributes:
        version: Schema version after this step.
        description: Summary recorded in schema_version.
        up_sql: Script that applies the step.
        down_sql: Script that reverts it.
    """

    version: int
    description: str
    up_sql: str
    down_sql: str


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        description="Terms with engagement counters, likes, comments, follows",
        up_sql="""
CREATE TABLE IF NOT EXISTS terms (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL,
    category_id INTEGER,
    author_id INTEGER,
    status TEXT NOT NULL DEFAULT 'pending',
    likes_count INTEGER NOT NULL DEFAULT 0,
    views INTEGER NOT NULL DEFAULT 0,
    comments_count INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_terms_status_created ON terms(status, created_at);
CREATE INDEX IF NOT EXISTS idx_terms_category ON terms(category_id);
CREATE INDEX IF NOT EXISTS idx_terms_author ON terms(author_id);

-- Polymorphic likes; ranking only reads target_type = 'term'
CREATE TABLE IF NOT EXISTS likes (
    id INTEGER PRIMARY KEY,
    user_id INTEGER NOT NULL,
    target_type TEXT NOT NULL,
    target_id INTEGER NOT NULL,
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_likes_user ON likes(user_id, target_type);
CREATE INDEX IF NOT EXISTS idx_likes_target
    ON likes(target_type, target_id, created_at);

CREATE TABLE IF NOT EXISTS comments (
    id INTEGER PRIMARY KEY,
    term_id INTEGER NOT NULL,
    user_id INTEGER NOT NULL,
    content TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_comments_term ON comments(term_id, created_at);

CREATE TABLE IF NOT EXISTS follows (
    follower_id INTEGER NOT NULL,
    following_id INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    PRIMARY KEY (follower_id, following_id)
);

CREATE TABLE IF NOT EXISTS user_specialties (
    user_id INTEGER NOT NULL,
    specialty TEXT NOT NULL,
    PRIMARY KEY (user_id, specialty)
);
""",
        down_sql="""
DROP TABLE IF EXISTS user_specialties;
DROP TABLE IF EXISTS follows;
DROP INDEX IF EXISTS idx_comments_term;
DROP TABLE IF EXISTS comments;
DROP INDEX IF EXISTS idx_likes_target;
DROP INDEX IF EXISTS idx_likes_user;
DROP TABLE IF EXISTS likes;
DROP INDEX IF EXISTS idx_terms_author;
DROP INDEX IF EXISTS idx_terms_category;
DROP INDEX IF EXISTS idx_terms_status_created;
DROP TABLE IF EXISTS terms;
""",
    ),
]

CURRENT_VERSION = MIGRATIONS[-1].version

SCHEMA_VERSION_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL,
    description TEXT
)
"""


def get_migrations_to_apply(current_version: int) -> list[Migration]:
    """Migrations newer than current_version, oldest first."""
    return [m for m in MIGRATIONS if m.version > current_version]


def get_migrations_to_revert(
    current_version: int, target_version: int
) -> list[Migration]:
    """Migrations above target_version up to current_version, newest first."""
    return [
        m
        for m in reversed(MIGRATIONS)
        if target_version < m.version <= current_version
    ]


class MigrationManager:
    """Brings one SQLite connection up to CURRENT_VERSION.

    Each step's script runs inside its own transaction, so a failing step
    leaves the database at the previous version.
    """

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._conn = connection
        self._log = logger.bind(component="store", operation="migration")

    def get_current_version(self) -> int:
        """Highest applied version, or 0 for a fresh database."""
        self._conn.execute(SCHEMA_VERSION_SQL)
        row = self._conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return int(row[0] or 0)

    def apply_migrations(self) -> list[int]:
        """Apply every pending step in order.

        Returns:
            Versions applied by this call, empty when already current.

        Raises:
            MigrationError: If a step fails.
        """
        current = self.get_current_version()
        applied: list[int] = []

        for migration in get_migrations_to_apply(current):
            self._apply(migration)
            applied.append(migration.version)

        if applied:
            self._log.info("migrations_applied", from_version=current, versions=applied)
        else:
            self._log.debug("schema_current", version=current)
        return applied

    def _apply(self, migration: Migration) -> None:
        self._log.info(
            "applying_migration",
            version=migration.version,
            description=migration.description,
        )
        try:
            self._conn.executescript(f"BEGIN;\n{migration.up_sql}\nCOMMIT;")
            self._conn.execute(
                "INSERT INTO schema_version (version, applied_at, description) "
                "VALUES (?, ?, ?)",
                (
                    migration.version,
                    format_timestamp(datetime.now(UTC)),
                    migration.description,
                ),
            )
            self._conn.commit()
        except sqlite3.Error as e:
            if self._conn.in_transaction:
                self._conn.rollback()
            self._log.error("migration_failed", version=migration.version, error=str(e))
            raise MigrationError(migration.version, str(e)) from e

    def rollback_to(self, target_version: int) -> list[int]:
        """Revert applied steps until the schema is at target_version.

        Args:
            target_version: Version to end at; 0 removes the whole schema.

        Returns:
            Versions reverted by this call, newest first.

        Raises:
            ValueError: If target_version is negative.
            MigrationError: If a down script fails.
        """
        if target_version < 0:
            msg = f"Invalid target version: {target_version}"
            raise ValueError(msg)

        current = self.get_current_version()
        reverted: list[int] = []

        for migration in get_migrations_to_revert(current, target_version):
            self._revert(migration)
            reverted.append(migration.version)

        if reverted:
            self._log.info(
                "migrations_reverted", to_version=target_version, versions=reverted
            )
        return reverted

    def _revert(self, migration: Migration) -> None:
        self._log.info("reverting_migration", version=migration.version)
        try:
            self._conn.executescript(f"BEGIN;\n{migration.down_sql}\nCOMMIT;")
            self._conn.execute(
                "DELETE FROM schema_version WHERE version = ?", (migration.version,)
            )
            self._conn.commit()
        except sqlite3.Error as e:
            if self._conn.in_transaction:
                self._conn.rollback()
            self._log.error("revert_failed", version=migration.version, error=str(e))
            raise MigrationError(migration.version, str(e)) from e
