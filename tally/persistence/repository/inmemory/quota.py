"""In-memory voter quota repository."""

from typing import TYPE_CHECKING, Optional

from tally.domain.model import QuotaState
from tally.domain.repository import QuotaRepository
from tally.domain.value import VoterId

if TYPE_CHECKING:
    from .store import InMemoryStoreTransaction


class InMemoryQuotaRepository(QuotaRepository):
    """In-memory implementation of QuotaRepository."""

    def __init__(self, tx: "InMemoryStoreTransaction") -> None:
        self.tx = tx

    async def get(self, voter_id: VoterId) -> Optional[QuotaState]:
        """Read a voter's quota."""
        if voter_id in self.tx.quota_writes:
            return self.tx.quota_writes[voter_id]
        return self.tx.store.quotas.get(voter_id)

    async def get_for_update(self, voter_id: VoterId) -> Optional[QuotaState]:
        """Lock and read a voter's quota."""
        await self.tx.lock(f"quota:{voter_id}")
        return await self.get(voter_id)

    async def save(self, state: QuotaState) -> QuotaState:
        """Stage a voter's quota state."""
        self.tx.quota_writes[state.voter_id] = state
        return state
