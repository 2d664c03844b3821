"""Get vote status use case."""

from pydantic import BaseModel

from tally.application.usecase.base import BaseUseCase, voter_from
from tally.domain.service import VoteService
from tally.domain.value import VoteType


class GetVoteStatusRequest(BaseModel):
    """Get vote status request."""

    product_id: str
    voter_id: str
    authenticated: bool = False


class GetVoteStatusResponse(BaseModel):
    """Get vote status response."""

    product_id: str
    vote_type: VoteType | None
    upvotes: int
    downvotes: int
    score: int
    has_voted: bool
    voter_tag: str | None


class GetVoteStatusUseCase(BaseUseCase):
    """Use case for reading a voter's vote on a product."""

    def __init__(self, vote_service: VoteService) -> None:
        self.vote_service = vote_service

    async def execute(self, request: GetVoteStatusRequest) -> GetVoteStatusResponse:
        voter = voter_from(request.voter_id, request.authenticated)
        status = await self.vote_service.get_vote_status(request.product_id, voter)
        return GetVoteStatusResponse(
            product_id=status.product_id,
            vote_type=status.vote_type,
            upvotes=status.upvotes,
            downvotes=status.downvotes,
            score=status.score,
            has_voted=status.has_voted,
            voter_tag=status.voter_tag,
        )
