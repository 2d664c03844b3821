"""In-memory store implementation for tests and offline runs."""

from .aggregate import InMemoryAggregateRepository
from .quota import InMemoryQuotaRepository
from .store import InMemoryStoreTransaction, InMemoryVoteStore
from .vote import InMemoryVoteRepository

__all__ = [
    "InMemoryAggregateRepository",
    "InMemoryQuotaRepository",
    "InMemoryStoreTransaction",
    "InMemoryVoteRepository",
    "InMemoryVoteStore",
]
