"""Anonymous voter quota state."""

from datetime import datetime

from pydantic import Field

from tally.domain.model.common import DomainModel
from tally.domain.value import VoterId


class QuotaState(DomainModel):
    """Remaining new-vote allowance for an anonymous voter.

    Created lazily on the first check and replaced with a fresh allowance
    once ``window_reset_at`` has passed.
    """

    voter_id: VoterId
    remaining: int = Field(ge=0)
    window_reset_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.window_reset_at
