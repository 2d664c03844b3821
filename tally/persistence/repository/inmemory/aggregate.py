"""In-memory product aggregate repository."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

import logfire

from tally.domain.model import ProductAggregate
from tally.domain.repository import AggregateRepository
from tally.domain.value import ProductId, VoteCounts
from tally.util.clock import utc_now

if TYPE_CHECKING:
    from .store import InMemoryStoreTransaction


def product_lock_name(product_id: ProductId) -> str:
    return f"product:{product_id}"


class InMemoryAggregateRepository(AggregateRepository):
    """In-memory implementation of AggregateRepository.

    Mutations take the product lock and keep it until the transaction ends,
    mirroring a row lock.
    """

    def __init__(self, tx: "InMemoryStoreTransaction") -> None:
        self.tx = tx

    def _current(self, product_id: ProductId) -> Optional[ProductAggregate]:
        if product_id in self.tx.aggregate_writes:
            return self.tx.aggregate_writes[product_id]
        return self.tx.store.aggregates.get(product_id)

    def _aggregates(self) -> dict[ProductId, ProductAggregate]:
        return {**self.tx.store.aggregates, **self.tx.aggregate_writes}

    async def get(self, product_id: ProductId) -> ProductAggregate:
        """Get a product's tally (empty if none)."""
        return self._current(product_id) or ProductAggregate.empty(product_id)

    async def get_for_update(self, product_id: ProductId) -> ProductAggregate:
        """Lock and get a product's tally."""
        await self.tx.lock(product_lock_name(product_id))
        return await self.get(product_id)

    async def exists(self, product_id: ProductId) -> bool:
        """Check whether a product is registered."""
        return self._current(product_id) is not None

    async def ensure(self, product_id: ProductId) -> ProductAggregate:
        """Register a product with an empty tally."""
        await self.tx.lock(product_lock_name(product_id))
        current = self._current(product_id)
        if current is None:
            current = ProductAggregate.empty(product_id)
            self.tx.aggregate_writes[product_id] = current
        return current

    async def apply_delta(
        self, product_id: ProductId, up_delta: int, down_delta: int
    ) -> ProductAggregate:
        """Adjust a product's counters, clamping at zero."""
        current = await self.get_for_update(product_id)

        upvotes = current.upvotes + up_delta
        downvotes = current.downvotes + down_delta
        if upvotes < 0 or downvotes < 0:
            logfire.warn(
                "Aggregate counter clamped at zero",
                product_id=product_id,
                upvotes=upvotes,
                downvotes=downvotes,
            )

        updated = current.model_copy(
            update={
                "upvotes": max(upvotes, 0),
                "downvotes": max(downvotes, 0),
                "version": current.version + 1,
                "updated_at": utc_now(),
            }
        )
        self.tx.aggregate_writes[product_id] = updated
        return updated

    async def replace(
        self, product_id: ProductId, counts: VoteCounts, reconciled_at: datetime
    ) -> ProductAggregate:
        """Overwrite a product's counters."""
        current = await self.get_for_update(product_id)
        replaced = ProductAggregate(
            product_id=product_id,
            upvotes=counts.upvotes,
            downvotes=counts.downvotes,
            version=current.version + 1,
            updated_at=reconciled_at,
            reconciled_at=reconciled_at,
        )
        self.tx.aggregate_writes[product_id] = replaced
        return replaced

    async def list_product_ids(self) -> list[ProductId]:
        """List products with a stored aggregate."""
        return sorted(self._aggregates())

    async def top(self, limit: int = 30, offset: int = 0) -> list[ProductAggregate]:
        """List aggregates by score."""
        ranked = sorted(
            self._aggregates().values(),
            key=lambda a: (-a.score, -a.upvotes, a.product_id),
        )
        return ranked[offset : offset + limit]
