"""Repository interfaces for the vote engine.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from tally.domain.repository.aggregate import AggregateRepository
from tally.domain.repository.quota import QuotaRepository
from tally.domain.repository.store import StoreTransaction, VoteKey, VoteStore
from tally.domain.repository.vote import VoteRepository

__all__ = [
    "AggregateRepository",
    "QuotaRepository",
    "StoreTransaction",
    "VoteKey",
    "VoteRepository",
    "VoteStore",
]
