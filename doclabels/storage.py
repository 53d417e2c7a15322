"""
Key-value substrates for label records.

SqliteStorage keeps entries in a single SQLite table so that several
processes (the equivalent of several open tabs) can share one store.
MemoryStorage keeps them in a dict for in-process use.

Both can enforce a quota on the total size of keys plus values, mirroring
the browser storage the records were designed for: a write that would
exceed it fails with StorageFailure and leaves the substrate unchanged.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional

from .errors import StorageFailure

logger = logging.getLogger(__name__)


def _entry_size(key: str, value: str) -> int:
    return len(key) + len(value)


class SqliteStorage:
    """
    SQLite-backed key-value substrate.

    Every read goes to the database; nothing is cached, so writes made by
    other connections are visible on the next call.
    """

    def __init__(self, store_path: Path, quota_bytes: Optional[int] = None):
        """
        Args:
            store_path: Path to SQLite database file
            quota_bytes: Maximum total size of keys plus values (None for no limit)
        """
        self._db_path = Path(store_path)
        self._quota_bytes = quota_bytes or None
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the SQLite database."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row

        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS entries (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self._conn.commit()

    @property
    def path(self) -> Path:
        return self._db_path

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageFailure(f"Storage is closed: {self._db_path}")
        return self._conn

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        """Get the raw value stored under a key, or None."""
        try:
            cursor = self._connection().execute(
                "SELECT value FROM entries WHERE key = ?", (key,)
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise StorageFailure(f"Could not read {key!r}: {e}") from e
        return row["value"] if row is not None else None

    def keys_with_prefix(self, prefix: str) -> list[str]:
        """
        List keys starting with a prefix.

        Uses substr() rather than LIKE so that '%' and '_' in the prefix
        match literally.
        """
        try:
            cursor = self._connection().execute(
                "SELECT key FROM entries WHERE substr(key, 1, ?) = ?",
                (len(prefix), prefix),
            )
            return [row["key"] for row in cursor]
        except sqlite3.Error as e:
            raise StorageFailure(f"Could not list keys: {e}") from e

    def usage(self) -> int:
        """Total size of keys plus values currently stored."""
        try:
            cursor = self._connection().execute(
                "SELECT COALESCE(SUM(length(key) + length(value)), 0) FROM entries"
            )
            return cursor.fetchone()[0]
        except sqlite3.Error as e:
            raise StorageFailure(f"Could not measure usage: {e}") from e

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any existing one.

        Raises:
            StorageFailure: On quota exhaustion or database errors
        """
        if self._quota_bytes is not None:
            existing = self.get(key)
            used = self.usage()
            if existing is not None:
                used -= _entry_size(key, existing)
            if used + _entry_size(key, value) > self._quota_bytes:
                raise StorageFailure(
                    f"Quota exceeded writing {key!r} "
                    f"({self._quota_bytes} bytes available)"
                )
        try:
            conn = self._connection()
            conn.execute(
                "INSERT OR REPLACE INTO entries (key, value) VALUES (?, ?)",
                (key, value),
            )
            conn.commit()
        except sqlite3.Error as e:
            raise StorageFailure(f"Could not write {key!r}: {e}") from e

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __del__(self):
        self.close()


class MemoryStorage:
    """Dict-backed key-value substrate for a single process."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self._entries: dict[str, str] = {}
        self._quota_bytes = quota_bytes or None

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return [k for k in self._entries if k.startswith(prefix)]

    def usage(self) -> int:
        return sum(_entry_size(k, v) for k, v in self._entries.items())

    def set(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = self.usage()
            if key in self._entries:
                used -= _entry_size(key, self._entries[key])
            if used + _entry_size(key, value) > self._quota_bytes:
                raise StorageFailure(
                    f"Quota exceeded writing {key!r} "
                    f"({self._quota_bytes} bytes available)"
                )
        self._entries[key] = value

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def open_storage(backend: str, store_path: Path, quota_bytes: Optional[int] = None):
    """
    Create a storage backend by name.

    Args:
        backend: "sqlite" or "memory"
        store_path: Store directory (the SQLite file lives inside it)
        quota_bytes: Optional quota, 0 or None for unlimited
    """
    if backend == "sqlite":
        return SqliteStorage(Path(store_path) / "labels.db", quota_bytes=quota_bytes)
    if backend == "memory":
        logger.debug("Using in-memory storage; labels will not persist")
        return MemoryStorage(quota_bytes=quota_bytes)
    raise ValueError(f"Unknown storage backend {backend!r} (expected 'sqlite' or 'memory')")
