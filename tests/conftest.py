from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable
from pathlib import Path

import pytest

from modeload_core.constants import CURSOR_SETTINGS_KEY
from store.database import KeyValueEngine

# Mirrors the table Cursor (VS Code) creates in state.vscdb.
ITEM_TABLE_SQL = "CREATE TABLE IF NOT EXISTS ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)"


def initialize_database(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(str(db_path))
    try:
        connection.execute(ITEM_TABLE_SQL)
        connection.commit()
    finally:
        connection.close()


class FakeEngine(KeyValueEngine):
    """In-memory engine that records writes and close calls."""

    def __init__(
        self,
        rows: dict[str, str] | None = None,
        fail_on_get: Exception | None = None,
        fail_on_set: Exception | None = None,
    ) -> None:
        self.rows: dict[str, str] = dict(rows or {})
        self.writes: list[tuple[str, str]] = []
        self.close_calls = 0
        self.fail_on_get = fail_on_get
        self.fail_on_set = fail_on_set

    def get(self, key: str) -> str | None:
        if self.fail_on_get is not None:
            raise self.fail_on_get
        return self.rows.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_on_set is not None:
            raise self.fail_on_set
        self.writes.append((key, value))
        self.rows[key] = value

    def close(self) -> None:
        self.close_calls += 1

    @property
    def closed(self) -> bool:
        return self.close_calls > 0


class RecordingFactory:
    """Engine factory handing out a single FakeEngine and remembering how it was opened."""

    def __init__(self, engine: FakeEngine) -> None:
        self.engine = engine
        self.calls: list[tuple[str, bool]] = []

    def __call__(self, db_path: str, readonly: bool) -> KeyValueEngine:
        self.calls.append((db_path, readonly))
        return self.engine


def compact(value: object) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


@pytest.fixture
def fake_engine_factory() -> Callable[..., RecordingFactory]:
    def _make(settings: object | None = None, raw: str | None = None, **kwargs) -> RecordingFactory:
        rows: dict[str, str] = {}
        if raw is not None:
            rows[CURSOR_SETTINGS_KEY] = raw
        elif settings is not None:
            rows[CURSOR_SETTINGS_KEY] = compact(settings)
        return RecordingFactory(FakeEngine(rows, **kwargs))

    return _make


@pytest.fixture
def make_cursor_db(tmp_path: Path) -> Callable[..., Path]:
    """Create a state.vscdb with an ItemTable holding the given settings."""

    def _make(
        settings: object | None = None,
        raw: str | None = None,
        name: str = "state.vscdb",
        extra_rows: dict[str, str] | None = None,
    ) -> Path:
        db_path = tmp_path / name
        initialize_database(db_path)
        connection = sqlite3.connect(str(db_path))
        try:
            value = raw if raw is not None else (compact(settings) if settings is not None else None)
            if value is not None:
                connection.execute(
                    "INSERT INTO ItemTable (key, value) VALUES (?, ?)",
                    (CURSOR_SETTINGS_KEY, value),
                )
            for key, item in (extra_rows or {}).items():
                connection.execute("INSERT INTO ItemTable (key, value) VALUES (?, ?)", (key, item))
            connection.commit()
        finally:
            connection.close()
        return db_path

    return _make


def read_row(db_path: Path, key: str = CURSOR_SETTINGS_KEY) -> str | None:
    connection = sqlite3.connect(str(db_path))
    try:
        row = connection.execute("SELECT value FROM ItemTable WHERE key = ?", (key,)).fetchone()
    finally:
        connection.close()
    if row is None:
        return None
    value = row[0]
    return value.decode("utf-8") if isinstance(value, bytes) else value
