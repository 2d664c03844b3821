"""Product aggregate repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from tally.domain.model.aggregate import ProductAggregate
from tally.domain.value import ProductId, VoteCounts


class AggregateRepository(ABC):
    """Repository for cached per-product tallies.

    Every mutation is atomic per product: the product stays locked for
    the rest of the enclosing store transaction.
    """

    @abstractmethod
    async def get(self, product_id: ProductId) -> ProductAggregate:
        """Get a product's tally.

        Returns:
            The stored aggregate, or an empty one if the product has none
        """
        pass

    @abstractmethod
    async def get_for_update(self, product_id: ProductId) -> ProductAggregate:
        """Lock a product's tally for the rest of the transaction and return it."""
        pass

    @abstractmethod
    async def exists(self, product_id: ProductId) -> bool:
        """Check whether a product has a registered aggregate."""
        pass

    @abstractmethod
    async def ensure(self, product_id: ProductId) -> ProductAggregate:
        """Register a product with an empty tally if it has none."""
        pass

    @abstractmethod
    async def apply_delta(
        self, product_id: ProductId, up_delta: int, down_delta: int
    ) -> ProductAggregate:
        """Atomically adjust a product's counters.

        Counters never go below zero; a clamped decrement means the cache
        has drifted from the ledger and is left for reconciliation.

        Args:
            product_id: The product to adjust
            up_delta: Change to apply to upvotes
            down_delta: Change to apply to downvotes

        Returns:
            The aggregate after the change
        """
        pass

    @abstractmethod
    async def replace(
        self, product_id: ProductId, counts: VoteCounts, reconciled_at: datetime
    ) -> ProductAggregate:
        """Overwrite a product's counters with recomputed values.

        Used only by reconciliation.
        """
        pass

    @abstractmethod
    async def list_product_ids(self) -> List[ProductId]:
        """List the ids of all products with a stored aggregate."""
        pass

    @abstractmethod
    async def top(self, limit: int = 30, offset: int = 0) -> List[ProductAggregate]:
        """List aggregates by score (desc), then upvotes (desc), then product id."""
        pass
