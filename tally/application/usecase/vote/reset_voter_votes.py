"""Reset voter votes use case."""

import logfire
from pydantic import BaseModel

from tally.application.usecase.base import BaseUseCase, voter_from
from tally.domain.service import VoteService


class ResetVoterVotesRequest(BaseModel):
    """Reset voter votes request."""

    voter_id: str
    authenticated: bool = False


class ResetVoterVotesResponse(BaseModel):
    """Reset voter votes response."""

    success: bool
    removed_votes: int


class ResetVoterVotesUseCase(BaseUseCase):
    """Use case for clearing every vote a voter holds.

    Used when a client rotates its anonymous voter token.
    """

    def __init__(self, vote_service: VoteService) -> None:
        self.vote_service = vote_service

    async def execute(self, request: ResetVoterVotesRequest) -> ResetVoterVotesResponse:
        with logfire.span("reset_voter_votes.execute", voter_id=request.voter_id):
            voter = voter_from(request.voter_id, request.authenticated)
            removed = await self.vote_service.remove_all_votes(voter)
            return ResetVoterVotesResponse(success=True, removed_votes=removed)
