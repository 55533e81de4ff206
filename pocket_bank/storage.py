"""
Snapshot Storage Module

Provides the abstract persistence port used by the account store and
implementations for in-memory (testing) and SQLite (persistence).
Each snapshot is a single serialized string kept under a fixed key.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Union
from datetime import datetime, timezone
from pathlib import Path
import sqlite3
import threading

from .config import BankConfig
from .logging_config import get_logger


logger = get_logger("pocket_bank.storage")


class SnapshotStorage(ABC):
    """Abstract interface for snapshot storage backends"""

    @abstractmethod
    def load_snapshot(self, key: str) -> Optional[str]:
        """Load a snapshot, or None if nothing is stored under the key"""
        pass

    @abstractmethod
    def save_snapshot(self, key: str, data: str) -> None:
        """Save a snapshot, replacing any previous one"""
        pass

    @abstractmethod
    def delete_snapshot(self, key: str) -> bool:
        """Delete a snapshot; returns True if one existed"""
        pass

    def close(self) -> None:
        """Close storage connection (default no-op)"""
        pass


class InMemorySnapshotStorage(SnapshotStorage):
    """In-memory storage implementation for testing"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def load_snapshot(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def save_snapshot(self, key: str, data: str) -> None:
        with self._lock:
            self._data[key] = data

    def delete_snapshot(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self):
        """Snapshot keys currently stored, for inspection"""
        with self._lock:
            return sorted(self._data)


class SQLiteSnapshotStorage(SnapshotStorage):
    """SQLite storage implementation for persistence"""

    table = "snapshots"

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()

        with self._lock:
            if self.db_path != ":memory:":
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")
            self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            self._connection.commit()

    def load_snapshot(self, key: str) -> Optional[str]:
        with self._lock:
            cursor = self._connection.execute(f"""
                SELECT data FROM {self.table} WHERE id = ?
            """, (key,))
            row = cursor.fetchone()
            if row:
                return row['data']
            return None

    def save_snapshot(self, key: str, data: str) -> None:
        with self._lock:
            now = datetime.now(timezone.utc).isoformat()
            # Keep the original created_at across replacements
            self._connection.execute(f"""
                INSERT OR REPLACE INTO {self.table} (id, data, created_at, updated_at)
                VALUES (?, ?,
                    COALESCE((SELECT created_at FROM {self.table} WHERE id = ?), ?),
                    ?)
            """, (key, data, key, now, now))
            self._connection.commit()

    def delete_snapshot(self, key: str) -> bool:
        with self._lock:
            cursor = self._connection.execute(f"""
                DELETE FROM {self.table} WHERE id = ?
            """, (key,))
            self._connection.commit()
            return cursor.rowcount > 0

    def snapshot_timestamps(self, key: str) -> Optional[Dict[str, str]]:
        """Return created_at/updated_at for a snapshot"""
        with self._lock:
            cursor = self._connection.execute(f"""
                SELECT created_at, updated_at FROM {self.table} WHERE id = ?
            """, (key,))
            row = cursor.fetchone()
            if row:
                return {"created_at": row['created_at'], "updated_at": row['updated_at']}
            return None

    def close(self) -> None:
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None


def create_storage(config: BankConfig) -> SnapshotStorage:
    """Create the storage backend selected by configuration"""
    if config.storage_backend == "memory":
        logger.debug("Using in-memory snapshot storage")
        return InMemorySnapshotStorage()
    logger.debug("Using SQLite snapshot storage at %s", config.database_path)
    return SQLiteSnapshotStorage(config.database_path)
