"""Read models returned by the vote service."""

from datetime import datetime

from pydantic import Field, computed_field

from tally.domain.model.aggregate import ProductAggregate
from tally.domain.model.common import DomainModel
from tally.domain.value import ProductId, VoteTransition, VoteType
from tally.util.clock import utc_now


class VoteStatus(DomainModel):
    """A voter's view of one product: their vote plus canonical counts.

    ``voter_tag`` is the pseudonymous id this voter's updates carry on the
    real-time stream.
    """

    product_id: ProductId
    vote_type: VoteType | None
    upvotes: int
    downvotes: int
    voter_tag: str | None = None

    @computed_field
    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes

    @computed_field
    @property
    def has_voted(self) -> bool:
        return self.vote_type is not None


class VoteResult(VoteStatus):
    """Canonical outcome of a cast.

    Clients replace any optimistic guess with these values wholesale.
    """

    success: bool = True
    transition: VoteTransition
    version: int = 0
    remaining_votes: int | None = None

    @classmethod
    def from_aggregate(
        cls,
        aggregate: ProductAggregate,
        vote_type: VoteType | None,
        transition: VoteTransition,
        remaining_votes: int | None,
        voter_tag: str | None = None,
    ) -> "VoteResult":
        return cls(
            product_id=aggregate.product_id,
            vote_type=vote_type,
            upvotes=aggregate.upvotes,
            downvotes=aggregate.downvotes,
            transition=transition,
            version=aggregate.version,
            remaining_votes=remaining_votes,
            voter_tag=voter_tag,
        )


class VoteUpdate(DomainModel):
    """Real-time message fanned out to a product's subscribers.

    Carries absolute counts, never deltas, so a late message can only cause
    a transient flicker; ``version`` lets subscribers drop stale ones.
    ``voter_id`` is the acting voter's tag, never the raw id.
    """

    product_id: ProductId
    voter_id: str
    vote_type: VoteType | None
    upvotes: int
    downvotes: int
    version: int
    published_at: datetime = Field(default_factory=utc_now)

    @computed_field
    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes

    @classmethod
    def from_result(cls, voter_tag: str, result: VoteResult) -> "VoteUpdate":
        return cls(
            product_id=result.product_id,
            voter_id=voter_tag,
            vote_type=result.vote_type,
            upvotes=result.upvotes,
            downvotes=result.downvotes,
            version=result.version,
        )
