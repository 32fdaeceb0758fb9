from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Optional

from .errors import StorageError
from .kvstore import KeyValueStore


@dataclass(frozen=True)
class _Cols:
    table: str = "kv_store"
    key: str = "key"
    value: str = "value"


_COLS = _Cols()


class SQLiteKeyValueStore(KeyValueStore):
    """
    Lightweight SQLite backend implementing the KeyValueStore interface.

    sqlite3 failures are re-raised as StorageError.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self, operation: str) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Could not open {self._db_path}: {e}", operation) from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"SQLite {operation} failed: {e}", operation) from e
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn("init") as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_COLS.table} (
                    {_COLS.key} TEXT PRIMARY KEY,
                    {_COLS.value} TEXT NOT NULL
                )
                """
            )

    def get_item(self, key: str) -> Optional[str]:
        with self._conn("read") as conn:
            row = conn.execute(
                f"SELECT {_COLS.value} FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,)
            ).fetchone()
            return None if row is None else str(row[0])

    def set_item(self, key: str, value: str) -> None:
        with self._conn("write") as conn:
            conn.execute(
                f"""
                INSERT INTO {_COLS.table} ({_COLS.key}, {_COLS.value}) VALUES (?, ?)
                ON CONFLICT({_COLS.key}) DO UPDATE SET {_COLS.value} = excluded.{_COLS.value}
                """,
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        with self._conn("remove") as conn:
            conn.execute(f"DELETE FROM {_COLS.table} WHERE {_COLS.key} = ?", (key,))
