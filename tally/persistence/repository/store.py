"""PostgreSQL implementation of the vote store."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import logfire
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tally.domain.error import ConcurrencyConflict, StorageError
from tally.domain.repository import StoreTransaction, VoteKey, VoteStore
from tally.persistence.repository.aggregate import PostgresAggregateRepository
from tally.persistence.repository.locks import advisory_xact_lock
from tally.persistence.repository.quota import PostgresQuotaRepository
from tally.persistence.repository.vote import PostgresVoteRepository


class PostgresStoreTransaction(StoreTransaction):
    """Repositories sharing one database transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.votes = PostgresVoteRepository(session)
        self.aggregates = PostgresAggregateRepository(session)
        self.quotas = PostgresQuotaRepository(session)


class PostgresVoteStore(VoteStore):
    """PostgreSQL implementation of VoteStore.

    Each transaction gets its own session. Per-key serialization uses a
    transaction-scoped advisory lock, which also covers keys that have no
    ledger row yet.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize store.

        Args:
            session_factory: Factory for database sessions
        """
        self.session_factory = session_factory

    @asynccontextmanager
    async def transaction(
        self, key: Optional[VoteKey] = None
    ) -> AsyncIterator[PostgresStoreTransaction]:
        """Open a database transaction, optionally holding the per-key lock."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    if key is not None:
                        await advisory_xact_lock(session, key.lock_name)
                    yield PostgresStoreTransaction(session)
        except IntegrityError as e:
            logfire.warn("Vote store integrity conflict", error=str(e))
            raise ConcurrencyConflict("Concurrent write conflict") from e
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logfire.error(
                "Vote store failure", error=str(e), error_type=type(e).__name__
            )
            raise StorageError("Vote storage unavailable") from e
