"""Unit tests for ListRankingsUseCase."""

import pytest

from tally.application.usecase.ranking import ListRankingsRequest, ListRankingsUseCase
from tally.domain.model import Voter
from tally.domain.service import VoteService
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestListRankings:
    """Tests for ranking pages."""

    @pytest.mark.asyncio
    async def test_rank_numbers_continue_across_pages(self, unit_env):
        # Arrange
        vote_service = await unit_env.get(VoteService)
        use_case = await unit_env.get(ListRankingsUseCase)
        for product_id, voters in (("a", 3), ("b", 2), ("c", 1)):
            for i in range(voters):
                await vote_service.cast_vote(product_id, Voter.authenticated(f"u{i}"), "up")

        # Act
        first = await use_case.execute(ListRankingsRequest(limit=2))
        second = await use_case.execute(ListRankingsRequest(limit=2, offset=2))

        # Assert
        assert [(i.rank, i.product_id, i.score) for i in first.items] == [
            (1, "a", 3),
            (2, "b", 2),
        ]
        assert [(i.rank, i.product_id) for i in second.items] == [(3, "c")]

    @pytest.mark.asyncio
    async def test_empty_store_has_no_items(self, unit_env):
        use_case = await unit_env.get(ListRankingsUseCase)

        response = await use_case.execute(ListRankingsRequest())

        assert response.items == []
        assert response.limit == 30
