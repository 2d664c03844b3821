"""Integration tests for PostgresVoteStore.

These tests need a migrated PostgreSQL database (``DATABASE__URL``) and are
skipped when it cannot be reached.
"""

import asyncio
from uuid import uuid4

import pytest
import pytest_asyncio

from tally.domain.error import StorageError
from tally.domain.model import Voter
from tally.domain.repository import VoteStore
from tally.domain.service import ReconciliationService, VoteService
from tally.domain.value import ProductId
from tests.harness import create_env_fixture

# Integration test fixture - real persistence
integration_env = create_env_fixture(unmock={"persistence"})


@pytest_asyncio.fixture
async def pg_env(integration_env):
    store = await integration_env.get(VoteStore)
    try:
        async with store.transaction() as tx:
            await tx.aggregates.list_product_ids()
    except StorageError:
        pytest.skip("PostgreSQL is not available")
    return integration_env


def unique_product() -> str:
    return f"it-{uuid4().hex}"


class TestPostgresVoteStore:
    """Vote casts against the real ledger and aggregate tables."""

    @pytest.mark.asyncio
    async def test_up_down_down(self, pg_env):
        # Arrange
        vote_service = await pg_env.get(VoteService)
        product_id = unique_product()
        voter = Voter.authenticated(f"user-{uuid4().hex}")

        # Act
        first = await vote_service.cast_vote(product_id, voter, "up")
        second = await vote_service.cast_vote(product_id, voter, "down")
        third = await vote_service.cast_vote(product_id, voter, "down")

        # Assert
        assert (first.upvotes, first.downvotes) == (1, 0)
        assert (second.upvotes, second.downvotes) == (0, 1)
        assert (third.upvotes, third.downvotes, third.vote_type) == (0, 0, None)

    @pytest.mark.asyncio
    async def test_concurrent_voters(self, pg_env):
        # Arrange
        vote_service = await pg_env.get(VoteService)
        store = await pg_env.get(VoteStore)
        product_id = unique_product()
        voters = [Voter.authenticated(f"user-{uuid4().hex}") for _ in range(10)]

        # Act
        await asyncio.gather(
            *(vote_service.cast_vote(product_id, voter, "up") for voter in voters)
        )

        # Assert
        async with store.transaction() as tx:
            counted = await tx.votes.count_by_product(ProductId(product_id))
            aggregate = await tx.aggregates.get(ProductId(product_id))
        assert counted.upvotes == 10
        assert aggregate.counts == counted

    @pytest.mark.asyncio
    async def test_anonymous_quota_is_persisted(self, pg_env):
        # Arrange
        vote_service = await pg_env.get(VoteService)
        voter = Voter.anonymous(f"anon-{uuid4().hex}")
        await vote_service.cast_vote(unique_product(), voter, "up")

        # Act
        decision = await vote_service.get_remaining_votes(voter)

        # Assert
        assert decision.remaining == decision.limit - 1

    @pytest.mark.asyncio
    async def test_reconcile_dry_run_does_not_write(self, pg_env):
        # Arrange
        vote_service = await pg_env.get(VoteService)
        reconciliation = await pg_env.get(ReconciliationService)
        await vote_service.cast_vote(
            unique_product(), Voter.authenticated(f"user-{uuid4().hex}"), "up"
        )

        # Act
        report = await reconciliation.reconcile(dry_run=True)

        # Assert
        assert report.dry_run
        assert report.repaired == 0
