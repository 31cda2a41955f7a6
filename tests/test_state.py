"""Tests for process state construction and the application lifespan."""

from __future__ import annotations

import dataclasses

import pytest

import hitcounter.main as main_module
from conftest import make_config
from hitcounter.core.errors import ConnectionUnavailable
from hitcounter.state import close_state, open_state


@pytest.fixture
def _reset_main():
    yield
    main_module._config = None
    main_module._state = None


@pytest.mark.asyncio
async def test_state_is_frozen(state):
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.store = None


@pytest.mark.asyncio
async def test_open_state_creates_schema(tmp_path):
    state = await open_state(make_config(tmp_path, "schema.db"))
    try:
        assert await state.store.increment_and_fetch("x") == 1
    finally:
        await close_state(state)
    assert (tmp_path / "schema.db").exists()


@pytest.mark.asyncio
async def test_lifespan_opens_and_closes_state(tmp_path, _reset_main):
    main_module.configure(make_config(tmp_path, "lifespan.db"))

    async with main_module.lifespan(main_module.app):
        state = main_module.get_state()
        assert await state.store.increment_and_fetch("boot") == 1

    assert main_module._state is None


@pytest.mark.asyncio
async def test_lifespan_fails_fast_without_database(tmp_path, _reset_main):
    config = make_config(tmp_path, create_schema=False)
    config.database.url = f"sqlite:///{tmp_path / 'missing-dir' / 'hits.db'}"
    main_module.configure(config)

    with pytest.raises(ConnectionUnavailable):
        async with main_module.lifespan(main_module.app):
            pytest.fail("server must not start without a database")

    assert main_module._state is None
