"""Ranking routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query

from tally.application.usecase.ranking import (
    ListRankingsRequest,
    ListRankingsResponse,
    ListRankingsUseCase,
)

router = APIRouter(prefix="/rankings", tags=["rankings"], route_class=DishkaRoute)


@router.get("", response_model=ListRankingsResponse)
async def list_rankings(
    list_rankings_use_case: FromDishka[ListRankingsUseCase],
    limit: int = Query(default=30, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> ListRankingsResponse:
    """List products by score.

    Args:
        list_rankings_use_case: List rankings use case from DI
        limit: Page size
        offset: Number of products to skip

    Returns:
        Ranked products
    """
    return await list_rankings_use_case.execute(
        ListRankingsRequest(limit=limit, offset=offset)
    )
