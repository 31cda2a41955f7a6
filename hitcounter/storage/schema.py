"""Table definition for the ``hits`` table and schema provisioning."""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, MetaData, Table, Text
from sqlalchemy.ext.asyncio import AsyncEngine

metadata = MetaData()

hits = Table(
    "hits",
    metadata,
    Column("target", Text, primary_key=True),
    Column("count", BigInteger, nullable=False),
)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the ``hits`` table if it does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
