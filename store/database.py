"""
SQLite utilities and the key-value interface over Cursor's ItemTable.
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from modeload_core.constants import ITEM_TABLE
from modeload_core.errors import SettingsParseError, StoreNotFoundError

logger = logging.getLogger(__name__)

# Every SQLite 3 database starts with these 16 bytes.
SQLITE_HEADER = b"SQLite format 3\x00"


class KeyValueEngine(ABC):
    """Minimal capability needed from the embedded store."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value for ``key`` or None when the row is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Replace the value of an existing row."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying handle."""


EngineFactory = Callable[[str, bool], KeyValueEngine]


class SQLiteKeyValueEngine(KeyValueEngine):
    def __init__(self, connection: sqlite3.Connection, table: str = ITEM_TABLE) -> None:
        self._connection: sqlite3.Connection | None = connection
        self.table: str = table

    @classmethod
    def open(cls, db_path: str, readonly: bool = True) -> "SQLiteKeyValueEngine":
        return cls(connect(db_path, readonly=readonly))

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise sqlite3.ProgrammingError("Cannot operate on a closed database.")
        return self._connection

    def get(self, key: str) -> str | None:
        connection = self._require_connection()
        row = connection.execute(
            f"SELECT value FROM {self.table} WHERE key = ?",
            (key,),
        ).fetchone()
        if row is None:
            return None
        value = row[0]
        if value is None:
            return None
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as e:
                raise SettingsParseError(f"Stored value for {key} is not valid UTF-8: {e}") from e
        return str(value)

    def set(self, key: str, value: str) -> None:
        connection = self._require_connection()
        cursor = connection.execute(
            f"UPDATE {self.table} SET value = ? WHERE key = ?",
            (value, key),
        )
        if cursor.rowcount == 0:
            connection.rollback()
            raise StoreNotFoundError(f"Settings not found in database. Key: {key}")
        connection.commit()

    def close(self) -> None:
        if self._connection is None:
            return
        self._connection.close()
        self._connection = None

    @property
    def closed(self) -> bool:
        return self._connection is None


def open_engine(db_path: str, readonly: bool = True) -> KeyValueEngine:
    """Default engine factory used by the save/load pipelines."""
    logger.debug("Opening %s (%s)", db_path, "readonly" if readonly else "read-write")
    return SQLiteKeyValueEngine.open(db_path, readonly=readonly)


def connect(db_path: str, readonly: bool = False) -> sqlite3.Connection:
    """Open a SQLite connection; read-only connections go through a URI."""
    if readonly:
        uri = f"{Path(db_path).resolve().as_uri()}?mode=ro"
        return sqlite3.connect(uri, uri=True)
    return sqlite3.connect(db_path)


def is_valid_store(db_path: str | Path) -> bool:
    """Return True iff the file starts with the SQLite header. Never raises."""
    path = Path(db_path)
    try:
        if not path.is_file():
            return False
        with open(path, "rb") as f:
            header = f.read(len(SQLITE_HEADER))
    except (OSError, ValueError) as e:
        logger.debug("Header check failed for %s: %s", path, e)
        return False
    return header == SQLITE_HEADER
