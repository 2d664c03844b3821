"""PostgreSQL advisory lock helpers."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def advisory_xact_lock(session: AsyncSession, name: str) -> None:
    """Take a transaction-scoped advisory lock keyed by name.

    Released automatically when the transaction commits or rolls back.
    """
    key = func.hashtextextended(name, 0)
    await session.execute(select(func.pg_advisory_xact_lock(key)))
