from pathlib import Path

import pytest

from todo_core.db import SQLiteKeyValueStore
from todo_core.errors import StorageError
from todo_core.kvstore import InMemoryKeyValueStore, get_key_value_store
from todo_core.settings import Settings
from todo_core.store import create_store


class TestSQLiteKeyValueStore:
    def test_set_get_remove(self, tmp_path: Path):
        kv = SQLiteKeyValueStore(str(tmp_path / "data" / "todos.db"))
        assert kv.get_item("k") is None
        kv.set_item("k", "v1")
        kv.set_item("k", "v2")
        assert kv.get_item("k") == "v2"
        kv.remove_item("k")
        kv.remove_item("k")
        assert kv.get_item("k") is None

    def test_values_survive_reopen(self, tmp_path: Path):
        path = str(tmp_path / "todos.db")
        SQLiteKeyValueStore(path).set_item("k", "[]")
        assert SQLiteKeyValueStore(path).get_item("k") == "[]"

    def test_unopenable_path_raises_storage_error(self, tmp_path: Path):
        with pytest.raises(StorageError):
            SQLiteKeyValueStore(str(tmp_path))


class TestBackendFactory:
    def test_memory_is_default(self):
        assert isinstance(get_key_value_store(Settings()), InMemoryKeyValueStore)

    def test_sqlite_backend(self, tmp_path: Path):
        settings = Settings(storage_backend="sqlite", sqlite_db_path=str(tmp_path / "todos.db"))
        assert isinstance(get_key_value_store(settings), SQLiteKeyValueStore)

    def test_store_persists_across_instances(self, tmp_path: Path, scheduler):
        settings = Settings(storage_backend="sqlite", sqlite_db_path=str(tmp_path / "todos.db"))

        first = create_store(settings, scheduler=scheduler)
        first.add_todo("survive restart")
        first.close()

        second = create_store(settings, scheduler=scheduler)
        assert [t["title"] for t in second.todos] == ["survive restart"]
        assert second.messages == []
