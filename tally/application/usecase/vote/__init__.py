"""Vote use cases."""

from .cast_vote import CastVoteRequest, CastVoteResponse, CastVoteUseCase
from .get_remaining_votes import (
    GetRemainingVotesRequest,
    GetRemainingVotesResponse,
    GetRemainingVotesUseCase,
)
from .get_vote_status import (
    GetVoteStatusRequest,
    GetVoteStatusResponse,
    GetVoteStatusUseCase,
)
from .reset_voter_votes import (
    ResetVoterVotesRequest,
    ResetVoterVotesResponse,
    ResetVoterVotesUseCase,
)

__all__ = [
    "CastVoteRequest",
    "CastVoteResponse",
    "CastVoteUseCase",
    "GetRemainingVotesRequest",
    "GetRemainingVotesResponse",
    "GetRemainingVotesUseCase",
    "GetVoteStatusRequest",
    "GetVoteStatusResponse",
    "GetVoteStatusUseCase",
    "ResetVoterVotesRequest",
    "ResetVoterVotesResponse",
    "ResetVoterVotesUseCase",
]
