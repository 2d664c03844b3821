"""Ranking use cases."""

from .list_rankings import (
    ListRankingsRequest,
    ListRankingsResponse,
    ListRankingsUseCase,
    RankingItem,
)

__all__ = [
    "ListRankingsRequest",
    "ListRankingsResponse",
    "ListRankingsUseCase",
    "RankingItem",
]
