"""Domain exceptions for the content store.

Infrastructure errors raised by sqlite3 itself (locked database, malformed
SQL) are not wrapped; they propagate to the caller unchanged.
"""


class ContentStoreError(Exception):
    """Base exception for all content store errors."""


class ConnectionError(ContentStoreError):
    """Raised when the store is used before a connection is established."""

    def __init__(self, message: str = "Database not connected") -> None:
        """Initialize the connection error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)


class MigrationError(ContentStoreError):
    """Raised when a schema migration fails."""

    def __init__(self, version: int, message: str) -> None:
        """Initialize the migration error.

        Args:
            version: The migration version that failed.
            message: Human-readable error message.
        """
        self.version = version
        super().__init__(f"Migration {version} failed: {message}")
