"""Vote store interface.

The store is the single storage port of the vote engine. It hands out
transactions that group the ledger, aggregate and quota repositories so a
cast either commits all of its writes or none of them.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import NamedTuple, Optional

from tally.domain.repository.aggregate import AggregateRepository
from tally.domain.repository.quota import QuotaRepository
from tally.domain.repository.vote import VoteRepository
from tally.domain.value import ProductId, VoterId


class VoteKey(NamedTuple):
    """Identity of one ledger entry."""

    product_id: ProductId
    voter_id: VoterId

    @property
    def lock_name(self) -> str:
        return f"vote:{self.product_id}:{self.voter_id}"


class StoreTransaction(ABC):
    """Repositories bound to one store transaction."""

    votes: VoteRepository
    aggregates: AggregateRepository
    quotas: QuotaRepository


class VoteStore(ABC):
    """Storage port for the ledger, aggregates and quotas."""

    @abstractmethod
    def transaction(
        self, key: Optional[VoteKey] = None
    ) -> AbstractAsyncContextManager[StoreTransaction]:
        """Open a transaction.

        Commits when the block exits normally and rolls back every write
        when it raises.

        Args:
            key: When given, the transaction holds the per-key lock for this
                (product, voter) pair until it ends, serializing casts on it

        Raises:
            StorageError: If the store cannot be read or written
            ConcurrencyConflict: If a lock could not be acquired in time
        """
        pass

    async def close(self) -> None:
        """Release resources held by the store."""
        return None
