"""Cast vote use case."""

from pydantic import BaseModel

from tally.application.usecase.base import BaseUseCase, voter_from
from tally.domain.service import VoteService
from tally.domain.value import VoteTransition, VoteType


class CastVoteRequest(BaseModel):
    """Cast vote request."""

    product_id: str
    # "up" | "down" | "clear" | None, or the legacy 1 | -1 | 0
    vote_type: str | int | None = None
    voter_id: str
    authenticated: bool = False


class CastVoteResponse(BaseModel):
    """Cast vote response.

    Canonical state after the cast; clients replace optimistic values with it.
    """

    success: bool
    product_id: str
    upvotes: int
    downvotes: int
    score: int
    vote_type: VoteType | None
    has_voted: bool
    transition: VoteTransition
    version: int
    remaining_votes: int | None
    voter_tag: str | None


class CastVoteUseCase(BaseUseCase):
    """Use case for casting, changing, toggling or clearing a vote."""

    def __init__(self, vote_service: VoteService) -> None:
        """Initialize cast vote use case.

        Args:
            vote_service: Vote domain service
        """
        self.vote_service = vote_service

    async def execute(self, request: CastVoteRequest) -> CastVoteResponse:
        """Execute cast vote flow.

        Args:
            request: Cast vote request

        Returns:
            Canonical counts and the voter's vote

        Raises:
            ValidationError: If the product, voter or vote type is malformed
            QuotaExceededError: If an anonymous voter is out of votes
            NotFoundError: If the product is unknown and auto-registration is off
            StorageError: If the vote could not be stored
        """
        voter = voter_from(request.voter_id, request.authenticated)
        result = await self.vote_service.cast_vote(
            request.product_id, voter, request.vote_type
        )

        return CastVoteResponse(
            success=result.success,
            product_id=result.product_id,
            upvotes=result.upvotes,
            downvotes=result.downvotes,
            score=result.score,
            vote_type=result.vote_type,
            has_voted=result.has_voted,
            transition=result.transition,
            version=result.version,
            remaining_votes=result.remaining_votes,
            voter_tag=result.voter_tag,
        )
