"""In-memory vote ledger repository."""

from typing import TYPE_CHECKING, Optional

from tally.domain.model import VoteRecord
from tally.domain.repository import VoteRepository
from tally.domain.value import ProductId, VoteCounts, VoterId, VoteType

if TYPE_CHECKING:
    from .store import InMemoryStoreTransaction


class InMemoryVoteRepository(VoteRepository):
    """In-memory implementation of VoteRepository.

    Reads see the transaction's own staged writes on top of committed state.
    """

    def __init__(self, tx: "InMemoryStoreTransaction") -> None:
        self.tx = tx

    def _records(self) -> dict[tuple[ProductId, VoterId], VoteRecord]:
        records = dict(self.tx.store.records)
        for key, record in self.tx.record_writes.items():
            if record is None:
                records.pop(key, None)
            else:
                records[key] = record
        return records

    async def get(self, product_id: ProductId, voter_id: VoterId) -> Optional[VoteRecord]:
        """Find a voter's vote on a product."""
        key = (product_id, voter_id)
        if key in self.tx.record_writes:
            return self.tx.record_writes[key]
        return self.tx.store.records.get(key)

    async def upsert(self, record: VoteRecord) -> VoteRecord:
        """Create or update a vote record, keeping the original created_at."""
        existing = await self.get(record.product_id, record.voter_id)
        if existing is not None:
            record = record.model_copy(update={"created_at": existing.created_at})
        self.tx.record_writes[(record.product_id, record.voter_id)] = record
        return record

    async def delete(self, product_id: ProductId, voter_id: VoterId) -> bool:
        """Delete a vote record."""
        if await self.get(product_id, voter_id) is None:
            return False
        self.tx.record_writes[(product_id, voter_id)] = None
        return True

    async def list_by_product(self, product_id: ProductId) -> list[VoteRecord]:
        """List every vote on a product."""
        return [r for r in self._records().values() if r.product_id == product_id]

    async def list_by_voter(self, voter_id: VoterId) -> list[VoteRecord]:
        """List every vote a voter holds."""
        return [r for r in self._records().values() if r.voter_id == voter_id]

    async def list_product_ids(self) -> list[ProductId]:
        """List products with at least one vote."""
        return sorted({product_id for product_id, _ in self._records()})

    async def count_by_product(self, product_id: ProductId) -> VoteCounts:
        """Count votes on a product."""
        records = await self.list_by_product(product_id)
        return VoteCounts(
            upvotes=sum(1 for r in records if r.vote_type == VoteType.UP),
            downvotes=sum(1 for r in records if r.vote_type == VoteType.DOWN),
        )
