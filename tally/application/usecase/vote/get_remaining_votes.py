"""Get remaining votes use case."""

from datetime import datetime

from pydantic import BaseModel

from tally.application.usecase.base import BaseUseCase, voter_from
from tally.domain.service import VoteService


class GetRemainingVotesRequest(BaseModel):
    """Get remaining votes request."""

    voter_id: str
    authenticated: bool = False


class GetRemainingVotesResponse(BaseModel):
    """Get remaining votes response.

    ``remaining_votes`` and ``max_votes`` are None for unlimited voters.
    """

    remaining_votes: int | None
    max_votes: int | None
    unlimited: bool
    window_reset_at: datetime | None


class GetRemainingVotesUseCase(BaseUseCase):
    """Use case for reading an anonymous voter's quota."""

    def __init__(self, vote_service: VoteService) -> None:
        self.vote_service = vote_service

    async def execute(
        self, request: GetRemainingVotesRequest
    ) -> GetRemainingVotesResponse:
        voter = voter_from(request.voter_id, request.authenticated)
        decision = await self.vote_service.get_remaining_votes(voter)
        return GetRemainingVotesResponse(
            remaining_votes=decision.remaining,
            max_votes=decision.limit,
            unlimited=decision.unlimited,
            window_reset_at=decision.window_reset_at,
        )
