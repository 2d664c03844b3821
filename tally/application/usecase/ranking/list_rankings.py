"""List rankings use case."""

import logfire
from pydantic import BaseModel, Field

from tally.application.usecase.base import BaseUseCase
from tally.domain.service import VoteService


class RankingItem(BaseModel):
    """Ranked product in response."""

    rank: int
    product_id: str
    upvotes: int
    downvotes: int
    score: int


class ListRankingsRequest(BaseModel):
    """List rankings request."""

    limit: int = Field(default=30, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class ListRankingsResponse(BaseModel):
    """List rankings response."""

    items: list[RankingItem]
    limit: int
    offset: int


class ListRankingsUseCase(BaseUseCase):
    """Use case for listing products by vote score."""

    def __init__(self, vote_service: VoteService) -> None:
        """Initialize list rankings use case.

        Args:
            vote_service: Vote domain service
        """
        self.vote_service = vote_service

    async def execute(self, request: ListRankingsRequest) -> ListRankingsResponse:
        """Execute list rankings flow.

        Args:
            request: Pagination parameters

        Returns:
            Products ordered by score, then upvotes, then product ID
        """
        with logfire.span(
            "list_rankings.execute", limit=request.limit, offset=request.offset
        ):
            aggregates = await self.vote_service.list_rankings(
                limit=request.limit, offset=request.offset
            )

            items = [
                RankingItem(
                    rank=request.offset + position,
                    product_id=aggregate.product_id,
                    upvotes=aggregate.upvotes,
                    downvotes=aggregate.downvotes,
                    score=aggregate.score,
                )
                for position, aggregate in enumerate(aggregates, start=1)
            ]

            return ListRankingsResponse(
                items=items, limit=request.limit, offset=request.offset
            )
