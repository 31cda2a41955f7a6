"""SQL-backed counter store.

Each operation borrows one connection from the engine's pool for the
shortest possible span and returns it before the result leaves the store.

The increment is two statements on the same connection:

1. an upsert (insert-or-increment-on-conflict), committed on its own, so the
   increment is durable even if the caller goes away before the read;
2. a read-back of the current count.

The read is not in the upsert's transaction. It returns the count at or
after this call's increment: a concurrent increment on the same target may
already be included.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from sqlalchemy import exc, text
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from hitcounter.core.errors import ConnectionUnavailable, QueryFailed
from hitcounter.core.models import HitRecord

log = structlog.get_logger()

# ``hits.count`` is qualified so the statement is valid on both SQLite and
# PostgreSQL.
_UPSERT_SQL = text(
    "INSERT INTO hits (target, count) VALUES (:target, 1) "
    "ON CONFLICT (target) DO UPDATE SET count = hits.count + 1"
)
_SELECT_SQL = text("SELECT count FROM hits WHERE target = :target")
_SELECT_RECORD_SQL = text("SELECT target, count FROM hits WHERE target = :target")
_PING_SQL = text("SELECT 1")


class SqlCounterStore:
    """CounterStore backed by a SQLAlchemy ``AsyncEngine``.

    The engine's pool is internally synchronized and shared by every caller,
    so no lock is taken here. Same-key increments are serialized only by the
    atomicity of the upsert statement.
    """

    def __init__(self, engine: AsyncEngine, statement_timeout: float | None = None) -> None:
        self._engine = engine
        self._statement_timeout = statement_timeout

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def _connect(self, target: str | None) -> AsyncConnection:
        """Check a connection out of the pool."""
        try:
            return await self._engine.connect()
        except (exc.SQLAlchemyError, OSError) as err:
            raise ConnectionUnavailable(
                f"could not acquire a database connection: {err}", target=target,
            ) from err

    async def _execute(
        self,
        conn: AsyncConnection,
        statement: Any,
        params: dict[str, Any] | None,
        target: str | None,
    ) -> CursorResult:
        try:
            return await asyncio.wait_for(
                conn.execute(statement, params), self._statement_timeout,
            )
        except asyncio.TimeoutError as err:
            raise QueryFailed(
                f"statement timed out after {self._statement_timeout}s", target=target,
            ) from err
        except exc.SQLAlchemyError as err:
            raise QueryFailed(f"statement failed: {err}", target=target) from err

    async def _commit(self, conn: AsyncConnection, target: str | None) -> None:
        try:
            await asyncio.wait_for(conn.commit(), self._statement_timeout)
        except asyncio.TimeoutError as err:
            raise QueryFailed(
                f"commit timed out after {self._statement_timeout}s", target=target,
            ) from err
        except exc.SQLAlchemyError as err:
            raise QueryFailed(f"commit failed: {err}", target=target) from err

    async def increment_and_fetch(self, target: str) -> int:
        """Increment the counter for ``target`` and return its current count.

        Raises ``ConnectionUnavailable`` if no connection can be checked out,
        ``QueryFailed`` if a statement fails. A failure after the commit leaves
        the increment applied.
        """
        params = {"target": target}
        conn = await self._connect(target)
        try:
            await self._execute(conn, _UPSERT_SQL, params, target)
            await self._commit(conn, target)
            log.debug("hit_count_incremented", target=target)

            result = await self._execute(conn, _SELECT_SQL, params, target)
            count = result.scalar_one_or_none()
        finally:
            await conn.close()

        if count is None:
            raise QueryFailed("no row found after upsert", target=target)
        return int(count)

    async def fetch(self, target: str) -> HitRecord | None:
        """Return the stored record for ``target`` without changing it."""
        conn = await self._connect(target)
        try:
            result = await self._execute(conn, _SELECT_RECORD_SQL, {"target": target}, target)
            row = result.one_or_none()
        finally:
            await conn.close()
        if row is None:
            return None
        return HitRecord(target=row.target, count=int(row.count))

    async def fetch_count(self, target: str) -> int | None:
        record = await self.fetch(target)
        return None if record is None else record.count

    async def ping(self) -> None:
        """Round-trip a trivial statement through a pooled connection."""
        conn = await self._connect(None)
        try:
            await self._execute(conn, _PING_SQL, None, None)
        finally:
            await conn.close()

    def pool_status(self) -> dict:
        """Checked-out / capacity figures for the health endpoint."""
        pool = self._engine.pool
        status: dict = {"status": pool.status()}
        # Only queue pools expose sizing.
        if hasattr(pool, "size") and hasattr(pool, "checkedout"):
            status["size"] = pool.size()
            status["checked_out"] = pool.checkedout()
        return status
