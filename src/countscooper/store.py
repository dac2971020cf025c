"""Persistence backends for the dismissal key set."""

import json
import os
import sqlite3
import tempfile
import threading
import time
from pathlib import Path
from typing import Iterable, Optional, Protocol, Set


class DismissalStore(Protocol):
    """Protocol for dismissal store implementations."""

    def load(self) -> Optional[Set[str]]:
        """Load persisted keys, or None if nothing usable is stored."""
        ...

    def save(self, keys: Iterable[str]) -> None:
        """Persist the full key set, replacing whatever was stored."""
        ...

    def clear(self) -> None:
        """Remove the persisted record entirely."""
        ...

    def close(self) -> None:
        """Release any held resources."""
        ...


class SQLiteDismissalStore:
    """
    SQLite dismissal store.

    Uses WAL mode and one connection per thread, so an engine shared
    between worker threads can still persist safely.
    """

    def __init__(self, db_path: Path):
        """
        Initialize SQLite dismissal store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        self._local = threading.local()

        # Ensure parent directory exists
        db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection with retry logic."""
        if not hasattr(self._local, "conn"):
            max_retries = 5
            retry_delay = 0.1

            for attempt in range(max_retries):
                try:
                    conn: sqlite3.Connection = sqlite3.connect(
                        str(self.db_path), timeout=30.0
                    )
                    conn.execute("PRAGMA journal_mode=WAL")
                    self._local.conn = conn
                    break
                except sqlite3.OperationalError as e:
                    if attempt < max_retries - 1:
                        # Exponential backoff
                        time.sleep(retry_delay)
                        retry_delay *= 2
                    else:
                        raise RuntimeError(
                            f"unable to open database file "
                            f"after {max_retries} attempts: {e}"
                        ) from e

        return self._local.conn  # type: ignore[no-any-return]

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS dismissed_keys (
                key TEXT PRIMARY KEY,
                created_at INTEGER NOT NULL
            )
            """
        )
        conn.commit()

    def load(self) -> Optional[Set[str]]:
        """
        Load dismissal keys.

        Returns:
            Set of keys, or None if the table is empty or unreadable
        """
        try:
            conn = self._get_connection()
            rows = conn.execute("SELECT key FROM dismissed_keys").fetchall()
        except sqlite3.Error:
            return None

        if not rows:
            return None
        return {str(row[0]) for row in rows}

    def save(self, keys: Iterable[str]) -> None:
        """
        Replace stored keys with the given set.

        Keys already present keep their original created_at.

        Args:
            keys: Complete dismissal key set
        """
        wanted = set(keys)
        conn = self._get_connection()
        now = int(time.time())
        with conn:
            # One bound parameter per statement, so large sets stay under
            # SQLITE_LIMIT_VARIABLE_NUMBER
            existing = {
                str(row[0])
                for row in conn.execute("SELECT key FROM dismissed_keys").fetchall()
            }
            conn.executemany(
                "DELETE FROM dismissed_keys WHERE key = ?",
                [(key,) for key in sorted(existing - wanted)],
            )
            conn.executemany(
                "INSERT OR IGNORE INTO dismissed_keys (key, created_at) VALUES (?, ?)",
                [(key, now) for key in sorted(wanted - existing)],
            )

    def clear(self) -> None:
        """Delete every stored key."""
        conn = self._get_connection()
        with conn:
            conn.execute("DELETE FROM dismissed_keys")

    def close(self) -> None:
        """Close database connection for current thread."""
        if hasattr(self._local, "conn"):
            self._local.conn.close()
            delattr(self._local, "conn")


class JSONDismissalStore:
    """
    JSON file dismissal store (a flat list of strings).

    Not thread-safe on its own; the engine serializes access.
    """

    def __init__(self, json_path: Path):
        self.json_path = json_path

    def load(self) -> Optional[Set[str]]:
        """Load keys; malformed or missing files count as absent."""
        if not self.json_path.exists():
            return None

        try:
            with open(self.json_path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError, UnicodeDecodeError):
            return None

        if not isinstance(data, list):
            return None
        if not all(isinstance(item, str) for item in data):
            return None
        return set(data)

    def save(self, keys: Iterable[str]) -> None:
        """Write to a sibling temp file, then swap it over the target."""
        self.json_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.json_path.name}.", suffix=".tmp", dir=self.json_path.parent
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(sorted(set(keys)), f, indent=2)
            os.replace(tmp_name, self.json_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        if self.json_path.exists():
            self.json_path.unlink()

    def close(self) -> None:
        pass


class MemoryDismissalStore:
    """In-process store for hosts without a writable disk."""

    def __init__(self, initial: Optional[Iterable[str]] = None):
        self._keys: Optional[Set[str]] = set(initial) if initial is not None else None
        self.save_count = 0

    def load(self) -> Optional[Set[str]]:
        return set(self._keys) if self._keys is not None else None

    def save(self, keys: Iterable[str]) -> None:
        self._keys = set(keys)
        self.save_count += 1

    def clear(self) -> None:
        self._keys = None

    def close(self) -> None:
        pass


def get_store(backend: str, path: Path) -> DismissalStore:
    """
    Create a dismissal store for the configured backend.

    Args:
        backend: 'sqlite', 'json' or 'memory'
        path: Location of the database/JSON file (ignored for memory)

    Returns:
        Store instance

    Raises:
        ValueError: If the backend name is unknown
    """
    if backend == "sqlite":
        return SQLiteDismissalStore(path)
    elif backend == "json":
        return JSONDismissalStore(path)
    elif backend == "memory":
        return MemoryDismissalStore()
    raise ValueError(f"Unknown dismissal store backend: {backend}")


def migrate_json_to_sqlite(json_path: Path, db_path: Path) -> int:
    """
    Migrate an existing JSON dismissal file to SQLite.

    Args:
        json_path: Path to existing JSON file
        db_path: Path to SQLite database

    Returns:
        Number of keys migrated
    """
    keys = JSONDismissalStore(json_path).load()
    if not keys:
        return 0

    sqlite_store = SQLiteDismissalStore(db_path)
    existing = sqlite_store.load() or set()
    sqlite_store.save(existing | keys)
    sqlite_store.close()
    return len(keys)
