"""Tests for configuration loading."""

from __future__ import annotations

import pytest

from hitcounter.config import AppConfig, load_config, normalize_database_url

_ENV_KEYS = (
    "DATABASE_URL",
    "HITS_DATABASE_URL",
    "HITS_DATABASE_POOL_SIZE",
    "HITS_DATABASE_CREATE_SCHEMA",
    "HITS_SERVER_PORT",
    "HITS_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults(tmp_path):
    config = load_config(tmp_path / "absent.yaml")
    assert config == AppConfig()
    assert config.server.host == "127.0.0.1"
    assert config.server.port == 3000
    assert config.database.url == "sqlite:data.db"


def test_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "server:\n"
        "  port: 8080\n"
        "database:\n"
        "  url: sqlite:/tmp/hits.db\n"
        "  pool_size: 12\n"
        "  unknown_key: ignored\n"
        "logging:\n"
        "  format: json\n"
    )
    config = load_config(path)
    assert config.server.port == 8080
    assert config.database.url == "sqlite:/tmp/hits.db"
    assert config.database.pool_size == 12
    assert not hasattr(config.database, "unknown_key")
    assert config.logging.format == "json"


def test_env_overrides_win(tmp_path, monkeypatch):
    path = tmp_path / "config.yaml"
    path.write_text("database:\n  pool_size: 12\n")
    monkeypatch.setenv("HITS_DATABASE_POOL_SIZE", "3")
    monkeypatch.setenv("HITS_DATABASE_CREATE_SCHEMA", "false")
    monkeypatch.setenv("HITS_SERVER_PORT", "9000")

    config = load_config(path)
    assert config.database.pool_size == 3
    assert config.database.create_schema is False
    assert config.server.port == 9000


def test_prefixed_database_url_beats_bare(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite:bare.db")
    assert load_config(tmp_path / "absent.yaml").database.url == "sqlite:bare.db"

    monkeypatch.setenv("HITS_DATABASE_URL", "sqlite:prefixed.db")
    assert load_config(tmp_path / "absent.yaml").database.url == "sqlite:prefixed.db"


@pytest.mark.parametrize("url, expected", [
    ("sqlite:data.db", "sqlite+aiosqlite:///data.db"),
    ("sqlite:/var/lib/hits.db", "sqlite+aiosqlite:////var/lib/hits.db"),
    ("sqlite:///data.db", "sqlite+aiosqlite:///data.db"),
    ("sqlite+aiosqlite:///data.db", "sqlite+aiosqlite:///data.db"),
    ("postgresql+asyncpg://u:p@db/hits", "postgresql+asyncpg://u:p@db/hits"),
])
def test_normalize_database_url(url, expected):
    assert normalize_database_url(url) == expected


@pytest.mark.parametrize("url", ["sqlite::memory:", "sqlite://", "sqlite:///:memory:"])
def test_in_memory_sqlite_rejected(url):
    with pytest.raises(ValueError):
        normalize_database_url(url)
