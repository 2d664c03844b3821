"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

import logfire
from dishka import Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tally.config import Settings, StorageSettings
from tally.domain.repository import VoteStore
from tally.persistence.database import create_engine, create_session_factory
from tally.persistence.repository import PostgresVoteStore
from tally.persistence.repository.inmemory import InMemoryVoteStore
from tally.util.di.base import ProviderBase
from tally.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using PostgreSQL."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine, disposed when the container closes."""
        engine = create_engine(settings)
        # Instrument SQLAlchemy for observability
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()
        logfire.info("Database engine disposed")

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.APP)
    def get_vote_store(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> VoteStore:
        """Provide PostgreSQL vote store."""
        return PostgresVoteStore(session_factory)


class InMemoryPersistenceProvider(PersistenceProvider):
    """In-memory persistence for tests and offline runs.

    One store per container, so each test container starts empty.
    """

    __is_mock__ = True

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def get_vote_store(self, storage_settings: StorageSettings) -> VoteStore:
        """Provide in-memory vote store."""
        logfire.info("Using in-memory vote store; votes are lost on exit")
        return InMemoryVoteStore(lock_timeout=storage_settings.lock_timeout_seconds)
