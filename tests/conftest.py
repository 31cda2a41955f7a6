"""Shared test fixtures."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

import hitcounter.main as main_module
from hitcounter.config import AppConfig
from hitcounter.state import close_state, open_state


def make_config(tmp_path, name: str = "hits.db", **database) -> AppConfig:
    """AppConfig pointing at a fresh SQLite file under ``tmp_path``."""
    config = AppConfig()
    config.database.url = f"sqlite:///{tmp_path / name}"
    config.database.pool_size = 5
    config.database.pool_timeout = 5.0
    config.logging.level = "warning"
    for k, v in database.items():
        setattr(config.database, k, v)
    return config


@pytest.fixture
def config(tmp_path) -> AppConfig:
    return make_config(tmp_path)


@pytest.fixture
async def state(config):
    """Open the process state for every test, using a temp database."""
    state = await open_state(config)

    # Patch module-level singletons
    main_module._config = config
    main_module._state = state

    yield state

    # Cleanup
    main_module._config = None
    main_module._state = None
    await close_state(state)


@pytest.fixture
def store(state):
    return state.store


@pytest.fixture
async def client(state):
    from hitcounter.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
