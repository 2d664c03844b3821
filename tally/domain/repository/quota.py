"""Voter quota repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from tally.domain.model.quota import QuotaState
from tally.domain.value import VoterId


class QuotaRepository(ABC):
    """Repository for anonymous voter quota state."""

    @abstractmethod
    async def get(self, voter_id: VoterId) -> Optional[QuotaState]:
        """Read a voter's quota without locking it."""
        pass

    @abstractmethod
    async def get_for_update(self, voter_id: VoterId) -> Optional[QuotaState]:
        """Lock a voter's quota for the rest of the transaction and return it.

        The lock is taken even when the voter has no quota state yet, so two
        first-time checks for the same voter cannot both start from a fresh
        allowance.
        """
        pass

    @abstractmethod
    async def save(self, state: QuotaState) -> QuotaState:
        """Create or overwrite a voter's quota state."""
        pass
