"""Server configuration.

Loads from config.yaml if present, with environment variable overrides.
Environment variables use the pattern: HITS_<SECTION>_<KEY> (uppercase).
The bare DATABASE_URL is honoured too; HITS_DATABASE_URL wins over it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

_ASYNC_SQLITE = "sqlite+aiosqlite"


@dataclass
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 3000
    env: str = "dev"  # "dev" or "prod"


@dataclass
class DatabaseConfig:
    url: str = "sqlite:data.db"
    pool_size: int = 5
    max_overflow: int = 0
    pool_timeout: float = 30.0
    statement_timeout: float = 10.0
    pool_pre_ping: bool = True
    create_schema: bool = True


@dataclass
class StatsConfig:
    active_window_seconds: float = 120.0


@dataclass
class LoggingConfig:
    level: str = "info"
    format: str = "console"  # "console" or "json"


@dataclass
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    stats: StatsConfig = field(default_factory=StatsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def normalize_database_url(url: str) -> str:
    """Turn short SQLite URLs into async SQLAlchemy URLs.

    ``sqlite:data.db``  -> ``sqlite+aiosqlite:///data.db``
    ``sqlite:///x.db``  -> ``sqlite+aiosqlite:///x.db``

    Anything that is not SQLite is returned unchanged. In-memory SQLite is
    rejected: every pooled connection would open its own empty database.
    """
    if not url.startswith("sqlite"):
        return url

    scheme, _, rest = url.partition(":")
    if scheme == "sqlite":
        scheme = _ASYNC_SQLITE
    if not rest.startswith("//"):
        rest = "///" + rest

    path = rest[3:].split("?", 1)[0]
    if path in ("", ":memory:") or "mode=memory" in rest:
        raise ValueError(f"in-memory SQLite is not supported: {url!r}")

    return f"{scheme}:{rest}"


def _apply_env_overrides(config: AppConfig) -> None:
    """Override config values from environment variables."""
    mapping = {
        "HITS_SERVER_HOST": lambda v: setattr(config.server, "host", v),
        "HITS_SERVER_PORT": lambda v: setattr(config.server, "port", int(v)),
        "HITS_SERVER_ENV": lambda v: setattr(config.server, "env", v),
        "DATABASE_URL": lambda v: setattr(config.database, "url", v),
        "HITS_DATABASE_URL": lambda v: setattr(config.database, "url", v),
        "HITS_DATABASE_POOL_SIZE": lambda v: setattr(config.database, "pool_size", int(v)),
        "HITS_DATABASE_MAX_OVERFLOW": lambda v: setattr(config.database, "max_overflow", int(v)),
        "HITS_DATABASE_POOL_TIMEOUT": lambda v: setattr(config.database, "pool_timeout", float(v)),
        "HITS_DATABASE_STATEMENT_TIMEOUT": lambda v: setattr(config.database, "statement_timeout", float(v)),
        "HITS_DATABASE_CREATE_SCHEMA": lambda v: setattr(config.database, "create_schema", _parse_bool(v)),
        "HITS_STATS_ACTIVE_WINDOW": lambda v: setattr(config.stats, "active_window_seconds", float(v)),
        "HITS_LOG_LEVEL": lambda v: setattr(config.logging, "level", v),
        "HITS_LOG_FORMAT": lambda v: setattr(config.logging, "format", v),
    }
    for env_key, setter in mapping.items():
        val = os.environ.get(env_key)
        if val is not None:
            setter(val)


def _apply_section(section: object, values: dict) -> None:
    known = {f.name for f in fields(section)}
    for k, v in values.items():
        if k in known:
            setattr(section, k, v)


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load configuration from YAML file + environment overrides."""
    config = AppConfig()

    if config_path is None:
        config_path = Path("config.yaml")
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}

        for name in ("server", "database", "stats", "logging"):
            if name in raw:
                _apply_section(getattr(config, name), raw[name] or {})

    # Environment overrides always win
    _apply_env_overrides(config)
    return config
