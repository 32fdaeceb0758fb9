from todo_core.settings import DEFAULT_STORAGE_KEY, get_settings

ENV_VARS = [
    "TODO_STORAGE_BACKEND",
    "SQLITE_DB_PATH",
    "TODO_STORAGE_KEY",
    "TODO_PERSIST_DEBOUNCE_MS",
    "TODO_SUCCESS_MESSAGE_TTL_MS",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
    "LOG_FORMAT",
]


def clear_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


class TestSettings:
    def test_defaults(self, monkeypatch):
        clear_env(monkeypatch)
        s = get_settings()
        assert s.storage_backend == "memory"
        assert s.storage_key == DEFAULT_STORAGE_KEY
        assert s.persist_debounce_ms == 500
        assert s.success_message_ttl_ms == 3000
        assert s.cors_allow_origins == ["*"]
        assert s.log_format == "console"

    def test_overrides(self, monkeypatch):
        clear_env(monkeypatch)
        monkeypatch.setenv("TODO_STORAGE_BACKEND", "SQLite")
        monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/x.db")
        monkeypatch.setenv("TODO_PERSIST_DEBOUNCE_MS", "250")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("LOG_FORMAT", "json")
        s = get_settings()
        assert s.storage_backend == "sqlite"
        assert s.sqlite_db_path == "/tmp/x.db"
        assert s.persist_debounce_ms == 250
        assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
        assert s.log_format == "json"

    def test_unsupported_values_fall_back(self, monkeypatch):
        clear_env(monkeypatch)
        monkeypatch.setenv("TODO_STORAGE_BACKEND", "redis")
        monkeypatch.setenv("TODO_SUCCESS_MESSAGE_TTL_MS", "soon")
        monkeypatch.setenv("TODO_PERSIST_DEBOUNCE_MS", "-5")
        monkeypatch.setenv("LOG_FORMAT", "xml")
        s = get_settings()
        assert s.storage_backend == "memory"
        assert s.success_message_ttl_ms == 3000
        assert s.persist_debounce_ms == 500
        assert s.log_format == "console"
