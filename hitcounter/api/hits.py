"""Hit counter endpoints.

Thin FastAPI adapter: takes the target from the path, calls the counter
store, and renders the count as plain text. Store errors are not caught
here; the application-level handler in ``hitcounter.main`` maps them.

The target is everything after ``/hit/``, URL-decoded. An encoded slash
(``/hit/a%2Fb``) and a literal one (``/hit/a/b``) both name the target ``a/b``;
``/hit/`` names the empty target.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()

log = structlog.get_logger()


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    from hitcounter.main import get_state

    return get_state().help_text


@router.get("/hit", response_class=PlainTextResponse)
async def hit_help() -> str:
    from hitcounter.main import get_state

    return get_state().help_text


@router.get("/hit/{target:path}", response_class=PlainTextResponse)
async def hit(target: str) -> str:
    """Increment the counter for ``target`` and return the current total.

    The value may already include concurrent increments of the same target.
    """
    from hitcounter.main import get_state

    state = get_state()
    log.info("hit", target=target)

    hits = await state.store.increment_and_fetch(target)

    state.stats.record_hit(target)
    log.info("total_hits", target=target, hits=hits)
    return str(hits)
