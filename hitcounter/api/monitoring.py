"""Health check and monitoring endpoints."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from hitcounter.core.errors import StoreError

router = APIRouter(prefix="/api/v1")


@router.get("/health")
async def health() -> JSONResponse:
    """Basic health check.

    Returns 503 when a pooled connection cannot run ``SELECT 1``.
    """
    from hitcounter.main import VERSION, get_state

    state = get_state()

    try:
        await state.store.ping()
        database_ok = True
        database_error = ""
    except StoreError as err:
        database_ok = False
        database_error = err.kind

    snapshot = state.stats.snapshot()
    result = {
        "status": "ok" if database_ok else "degraded",
        "version": VERSION,
        "uptime_seconds": snapshot["uptime_seconds"],
        "database_reachable": database_ok,
        "pool": state.store.pool_status(),
    }
    if database_error:
        result["database_error"] = database_error
    return JSONResponse(content=result, status_code=200 if database_ok else 503)


@router.get("/stats")
async def stats() -> dict:
    """Request and error counters since startup.

    ``active_targets.total`` counts targets hit within the last
    ``window_seconds``.
    """
    from hitcounter.main import get_state

    return get_state().stats.snapshot()
