"""Vote ledger repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from tally.domain.model.vote import VoteRecord
from tally.domain.value import ProductId, VoteCounts, VoterId


class VoteRepository(ABC):
    """Repository for the vote ledger.

    Defines the contract for vote record persistence within a store
    transaction. Implementations live in the persistence layer.
    """

    @abstractmethod
    async def get(self, product_id: ProductId, voter_id: VoterId) -> Optional[VoteRecord]:
        """Find a voter's vote on a product.

        Args:
            product_id: The product's identifier
            voter_id: The voter's identifier

        Returns:
            The vote record if one exists, None otherwise
        """
        pass

    @abstractmethod
    async def upsert(self, record: VoteRecord) -> VoteRecord:
        """Create the record or update its vote type in place.

        Args:
            record: The vote record to write

        Returns:
            The written record
        """
        pass

    @abstractmethod
    async def delete(self, product_id: ProductId, voter_id: VoterId) -> bool:
        """Delete a voter's vote on a product.

        Returns:
            True if a record was deleted, False if none existed
        """
        pass

    @abstractmethod
    async def list_by_product(self, product_id: ProductId) -> List[VoteRecord]:
        """List every vote cast on a product."""
        pass

    @abstractmethod
    async def list_by_voter(self, voter_id: VoterId) -> List[VoteRecord]:
        """List every vote a voter holds."""
        pass

    @abstractmethod
    async def list_product_ids(self) -> List[ProductId]:
        """List the ids of all products with at least one vote."""
        pass

    @abstractmethod
    async def count_by_product(self, product_id: ProductId) -> VoteCounts:
        """Count up and down votes on a product straight from the ledger."""
        pass
