"""Storage interface (port) for per-target hit counters."""

from __future__ import annotations

from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from hitcounter.core.models import HitRecord


class CounterStore(Protocol):
    """Port: atomically increments and reads per-target counters.

    Implementations raise ``ConnectionUnavailable`` or ``QueryFailed``
    (see ``hitcounter.core.errors``) and never retry.
    """

    async def increment_and_fetch(self, target: str) -> int: ...

    async def fetch(self, target: str) -> HitRecord | None: ...

    async def fetch_count(self, target: str) -> int | None: ...

    async def ping(self) -> None: ...

    def pool_status(self) -> dict: ...
