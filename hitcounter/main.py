"""hitcounter server — main entry point.

This is the only file that knows about concrete implementations.
It wires together the config, process state, and API layers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from hitcounter.api.hits import router as hits_router
from hitcounter.api.monitoring import router as monitoring_router
from hitcounter.config import AppConfig, load_config
from hitcounter.core.errors import StoreError
from hitcounter.state import ProcessState, close_state, open_state

VERSION = "0.1.0"

log = structlog.get_logger()

# Module-level singletons (set during startup)
_state: ProcessState | None = None
_config: AppConfig | None = None


def get_state() -> ProcessState:
    assert _state is not None, "Server not initialized"
    return _state


def configure(config: AppConfig) -> None:
    """Use ``config`` instead of loading config.yaml at startup."""
    global _config
    _config = config


def _setup_logging(config: AppConfig) -> None:
    """Configure structlog based on the logging config."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.logging.format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.logging.level.upper()),
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    global _state, _config

    if _config is None:
        _config = load_config()
    _setup_logging(_config)

    log.info("server_starting",
             env=_config.server.env,
             pool_size=_config.database.pool_size,
             create_schema=_config.database.create_schema)

    try:
        _state = await open_state(_config)
    except Exception:
        log.error("database_unavailable", exc_info=True)
        raise

    log.info("server_started",
             host=_config.server.host,
             port=_config.server.port)

    yield

    # Shutdown
    state, _state = _state, None
    await close_state(state)
    log.info("server_stopped")


app = FastAPI(
    title="hitcounter",
    description="Per-target hit counter",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, err: StoreError) -> PlainTextResponse:
    """Any store failure becomes a 500. The increment may still have applied."""
    if _state is not None:
        _state.stats.record_store_error(err.kind)
    log.error("store_error",
              kind=err.kind,
              target=err.target,
              path=request.url.path,
              error=str(err))
    return PlainTextResponse("internal server error", status_code=500)


app.include_router(hits_router)
app.include_router(monitoring_router)
