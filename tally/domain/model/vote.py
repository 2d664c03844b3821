"""Vote ledger entry.

The ledger is the source of truth for tallies: one record per
(product, voter) pair, absent when the voter holds no vote.
"""

from datetime import datetime

from pydantic import Field

from tally.domain.model.common import DomainModel
from tally.domain.value import (
    ProductId,
    VoteChoice,
    VoteCounts,
    VoterId,
    VoteTransition,
    VoteType,
)
from tally.util.clock import utc_now


class VoteRecord(DomainModel):
    """A single voter's vote on a single product.

    Business rules:
    - At most one record per (product_id, voter_id)
    - Changing direction updates the record in place
    - Toggling off or clearing deletes the record
    """

    product_id: ProductId
    voter_id: VoterId
    vote_type: VoteType
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class VotePlan(DomainModel):
    """Resolved outcome of applying a choice to the current vote."""

    transition: VoteTransition
    previous: VoteType | None
    vote_type: VoteType | None
    delta: VoteCounts

    @property
    def is_new_vote(self) -> bool:
        """Whether this plan creates a vote where none existed (costs quota)."""
        return self.transition == VoteTransition.CREATED

    @classmethod
    def resolve(cls, current: VoteType | None, choice: VoteChoice) -> "VotePlan":
        """Apply the vote state machine.

        | current | requested | transition |
        |---------|-----------|------------|
        | none    | up/down   | created    |
        | x       | x         | toggled_off|
        | up/down | other     | changed    |
        | up/down | clear     | cleared    |
        | none    | clear     | noop       |
        """
        requested = choice.vote_type

        if requested is None:
            transition = VoteTransition.CLEARED if current else VoteTransition.NOOP
            target = None
        elif current is None:
            transition = VoteTransition.CREATED
            target = requested
        elif current == requested:
            # Voting the same way twice removes the vote
            transition = VoteTransition.TOGGLED_OFF
            target = None
        else:
            transition = VoteTransition.CHANGED
            target = requested

        removed = VoteCounts.for_vote(current, sign=-1) if current != target else VoteCounts()
        added = VoteCounts.for_vote(target) if current != target else VoteCounts()
        delta = VoteCounts(
            upvotes=removed.upvotes + added.upvotes,
            downvotes=removed.downvotes + added.downvotes,
        )

        return cls(transition=transition, previous=current, vote_type=target, delta=delta)
