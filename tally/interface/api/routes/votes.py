"""Vote routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Cookie
from pydantic import BaseModel

from tally.application.usecase.vote import (
    CastVoteRequest,
    CastVoteResponse,
    CastVoteUseCase,
    GetRemainingVotesRequest,
    GetRemainingVotesResponse,
    GetRemainingVotesUseCase,
    GetVoteStatusRequest,
    GetVoteStatusResponse,
    GetVoteStatusUseCase,
    ResetVoterVotesRequest,
    ResetVoterVotesResponse,
    ResetVoterVotesUseCase,
)
from tally.domain.service import JWTService
from tally.interface.api.identity import resolve_voter

router = APIRouter(prefix="/vote", tags=["votes"], route_class=DishkaRoute)


class CastVoteAPIRequest(BaseModel):
    """API request for casting a vote."""

    product_id: str
    # "up" | "down" | "clear" | null, or the legacy 1 | -1 | 0
    vote_type: str | int | None = None
    voter_id: str | None = None


class ResetVotesAPIRequest(BaseModel):
    """API request for clearing a voter's votes."""

    voter_id: str | None = None


@router.get("", response_model=GetVoteStatusResponse)
async def get_vote_status(
    product_id: str,
    get_vote_status_use_case: FromDishka[GetVoteStatusUseCase],
    jwt_service: FromDishka[JWTService],
    voter_id: str | None = None,
    auth_token: str | None = Cookie(default=None),
) -> GetVoteStatusResponse:
    """Get the caller's vote on a product and the product's counts.

    Args:
        product_id: Product ID
        get_vote_status_use_case: Get vote status use case from DI
        jwt_service: JWT service for token verification (injected)
        voter_id: Anonymous voter ID (ignored when signed in)
        auth_token: JWT token from cookie

    Returns:
        Vote status
    """
    voter = resolve_voter(jwt_service, voter_id, auth_token)
    return await get_vote_status_use_case.execute(
        GetVoteStatusRequest(
            product_id=product_id,
            voter_id=voter.id,
            authenticated=voter.is_authenticated,
        )
    )


@router.post("", response_model=CastVoteResponse)
async def cast_vote(
    request: CastVoteAPIRequest,
    cast_vote_use_case: FromDishka[CastVoteUseCase],
    jwt_service: FromDishka[JWTService],
    auth_token: str | None = Cookie(default=None),
) -> CastVoteResponse:
    """Cast, change, toggle or clear a vote.

    Voting the same way twice removes the vote. Anonymous voters have a
    limited number of new votes per window; signed-in voters do not.

    Args:
        request: Product, vote type and anonymous voter ID
        cast_vote_use_case: Cast vote use case from DI
        jwt_service: JWT service for token verification (injected)
        auth_token: JWT token from cookie

    Returns:
        Canonical counts after the vote
    """
    voter = resolve_voter(jwt_service, request.voter_id, auth_token)
    return await cast_vote_use_case.execute(
        CastVoteRequest(
            product_id=request.product_id,
            vote_type=request.vote_type,
            voter_id=voter.id,
            authenticated=voter.is_authenticated,
        )
    )


@router.get("/remaining-votes", response_model=GetRemainingVotesResponse)
async def get_remaining_votes(
    get_remaining_votes_use_case: FromDishka[GetRemainingVotesUseCase],
    jwt_service: FromDishka[JWTService],
    voter_id: str | None = None,
    auth_token: str | None = Cookie(default=None),
) -> GetRemainingVotesResponse:
    """Get how many new votes the caller may still cast in this window."""
    voter = resolve_voter(jwt_service, voter_id, auth_token)
    return await get_remaining_votes_use_case.execute(
        GetRemainingVotesRequest(
            voter_id=voter.id, authenticated=voter.is_authenticated
        )
    )


@router.post("/reset", response_model=ResetVoterVotesResponse)
async def reset_votes(
    request: ResetVotesAPIRequest,
    reset_voter_votes_use_case: FromDishka[ResetVoterVotesUseCase],
    jwt_service: FromDishka[JWTService],
    auth_token: str | None = Cookie(default=None),
) -> ResetVoterVotesResponse:
    """Clear every vote the caller holds."""
    voter = resolve_voter(jwt_service, request.voter_id, auth_token)
    return await reset_voter_votes_use_case.execute(
        ResetVoterVotesRequest(
            voter_id=voter.id, authenticated=voter.is_authenticated
        )
    )
