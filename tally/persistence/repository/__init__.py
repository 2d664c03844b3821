"""PostgreSQL repository implementations."""

from tally.persistence.repository.aggregate import PostgresAggregateRepository
from tally.persistence.repository.quota import PostgresQuotaRepository
from tally.persistence.repository.store import PostgresStoreTransaction, PostgresVoteStore
from tally.persistence.repository.vote import PostgresVoteRepository

__all__ = [
    "PostgresAggregateRepository",
    "PostgresQuotaRepository",
    "PostgresStoreTransaction",
    "PostgresVoteRepository",
    "PostgresVoteStore",
]
