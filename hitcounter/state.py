"""Process-wide state shared by every request handler.

Created once before the server accepts requests and handed to handlers by
reference. The engine's pool is internally synchronized; ``ServerStats``
carries its own lock. Nothing here is copied per request.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

from hitcounter.config import AppConfig, normalize_database_url
from hitcounter.core.stats import ServerStats
from hitcounter.storage.base import CounterStore
from hitcounter.storage.schema import create_schema
from hitcounter.storage.sql_storage import SqlCounterStore

log = structlog.get_logger()

HELP_TEXT = "Navigate to `/hit/foo` to increment the hit count for `foo`"


@dataclass(frozen=True)
class ProcessState:
    config: AppConfig
    engine: AsyncEngine
    store: CounterStore
    stats: ServerStats
    help_text: str = HELP_TEXT


def build_engine(config: AppConfig) -> AsyncEngine:
    """Create the engine and its bounded connection pool."""
    db = config.database
    return create_async_engine(
        normalize_database_url(db.url),
        poolclass=AsyncAdaptedQueuePool,
        pool_size=db.pool_size,
        max_overflow=db.max_overflow,
        pool_timeout=db.pool_timeout,
        pool_pre_ping=db.pool_pre_ping,
    )


async def open_state(config: AppConfig) -> ProcessState:
    """Connect to the database and build the shared state.

    Fails fast: any error reaching the database propagates and the engine
    is disposed, so the caller never starts serving.
    """
    engine = build_engine(config)
    store = SqlCounterStore(engine, statement_timeout=config.database.statement_timeout)
    try:
        if config.database.create_schema:
            await create_schema(engine)
        await store.ping()
    except Exception:
        await engine.dispose()
        raise

    log.info("database_connected",
             url=engine.url.render_as_string(hide_password=True),
             pool_size=config.database.pool_size)

    return ProcessState(
        config=config,
        engine=engine,
        store=store,
        stats=ServerStats(active_window_seconds=config.stats.active_window_seconds),
    )


async def close_state(state: ProcessState) -> None:
    """Dispose the pool. Connections still checked out are closed on return."""
    await state.engine.dispose()
