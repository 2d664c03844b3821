"""Unit tests for ReconciliationService."""

import pytest

from tally.domain.model import Voter
from tally.domain.repository import VoteStore
from tally.domain.service import ReconciliationService, VoteService
from tally.domain.value import ProductId, VoteCounts, VoteType
from tests.conftest import seed_aggregate, seed_vote
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


class TestReconcile:
    """Tests for recomputing aggregates from the ledger."""

    @pytest.mark.asyncio
    async def test_consistent_store_reports_no_drift(self, unit_env):
        # Arrange
        vote_service = await unit_env.get(VoteService)
        reconciliation = await unit_env.get(ReconciliationService)
        await vote_service.cast_vote("p1", Voter.anonymous("v1"), "up")
        await vote_service.cast_vote("p1", Voter.anonymous("v2"), "down")
        await vote_service.cast_vote("p2", Voter.anonymous("v1"), "up")

        # Act
        report = await reconciliation.reconcile()

        # Assert
        assert report.consistent
        assert report.products_checked == 2
        assert report.records_scanned == 3
        assert report.repaired == 0
        assert report.finished_at is not None

    @pytest.mark.asyncio
    async def test_repairs_drifted_aggregate(self, unit_env):
        # Arrange
        store = await unit_env.get(VoteStore)
        reconciliation = await unit_env.get(ReconciliationService)
        seed_vote(store, "p1", "v1", VoteType.UP)
        seed_vote(store, "p1", "v2", VoteType.UP)
        seed_aggregate(store, "p1", upvotes=5, downvotes=1)

        # Act
        report = await reconciliation.reconcile()

        # Assert
        assert report.repaired == 1
        drift = report.drifts[0]
        assert drift.stored == VoteCounts(upvotes=5, downvotes=1)
        assert drift.actual == VoteCounts(upvotes=2, downvotes=0)
        assert drift.diff == VoteCounts(upvotes=-3, downvotes=-1)

        repaired = store.aggregates[ProductId("p1")]
        assert (repaired.upvotes, repaired.downvotes) == (2, 0)
        assert repaired.reconciled_at is not None
        assert repaired.version == 1

    @pytest.mark.asyncio
    async def test_missing_aggregate_is_created_from_ledger(self, unit_env):
        # Arrange
        store = await unit_env.get(VoteStore)
        reconciliation = await unit_env.get(ReconciliationService)
        seed_vote(store, "p1", "v1", VoteType.DOWN)

        # Act
        report = await reconciliation.reconcile()

        # Assert
        assert len(report.drifts) == 1
        assert store.aggregates[ProductId("p1")].downvotes == 1

    @pytest.mark.asyncio
    async def test_aggregate_without_votes_is_reset(self, unit_env):
        # Arrange
        store = await unit_env.get(VoteStore)
        reconciliation = await unit_env.get(ReconciliationService)
        seed_aggregate(store, "orphan", upvotes=4)

        # Act
        report = await reconciliation.reconcile()

        # Assert
        assert report.drifts[0].product_id == "orphan"
        assert store.aggregates[ProductId("orphan")].upvotes == 0

    @pytest.mark.asyncio
    async def test_dry_run_reports_without_writing(self, unit_env):
        # Arrange
        store = await unit_env.get(VoteStore)
        reconciliation = await unit_env.get(ReconciliationService)
        seed_vote(store, "p1", "v1", VoteType.UP)
        seed_aggregate(store, "p1", upvotes=0)

        # Act
        report = await reconciliation.reconcile(dry_run=True)

        # Assert
        assert report.dry_run
        assert len(report.drifts) == 1
        assert report.repaired == 0
        assert store.aggregates[ProductId("p1")].upvotes == 0

    @pytest.mark.asyncio
    async def test_second_pass_is_clean(self, unit_env):
        # Arrange
        store = await unit_env.get(VoteStore)
        reconciliation = await unit_env.get(ReconciliationService)
        seed_vote(store, "p1", "v1", VoteType.UP)
        seed_aggregate(store, "p1", downvotes=2)
        await reconciliation.reconcile()

        # Act
        report = await reconciliation.reconcile()

        # Assert
        assert report.consistent

    @pytest.mark.asyncio
    async def test_votes_after_repair_build_on_corrected_counts(self, unit_env):
        # Arrange
        store = await unit_env.get(VoteStore)
        vote_service = await unit_env.get(VoteService)
        reconciliation = await unit_env.get(ReconciliationService)
        seed_vote(store, "p1", "v1", VoteType.UP)
        seed_aggregate(store, "p1", upvotes=10)
        await reconciliation.reconcile()

        # Act
        result = await vote_service.cast_vote("p1", Voter.anonymous("v2"), "up")

        # Assert
        assert result.upvotes == 2


class TestTargetedReconcile:
    """Passes limited to named products."""

    @pytest.mark.asyncio
    async def test_only_named_products_are_repaired(self, unit_env):
        # Arrange
        store = await unit_env.get(VoteStore)
        reconciliation = await unit_env.get(ReconciliationService)
        seed_vote(store, "p1", "v1", VoteType.UP)
        seed_aggregate(store, "p1", upvotes=7)
        seed_aggregate(store, "p2", downvotes=3)

        # Act
        report = await reconciliation.reconcile(product_ids=[ProductId("p1")])

        # Assert
        assert report.products_checked == 1
        assert [d.product_id for d in report.drifts] == ["p1"]
        assert store.aggregates[ProductId("p1")].upvotes == 1
        assert store.aggregates[ProductId("p2")].downvotes == 3

    @pytest.mark.asyncio
    async def test_targeted_dry_run_writes_nothing(self, unit_env):
        # Arrange
        store = await unit_env.get(VoteStore)
        reconciliation = await unit_env.get(ReconciliationService)
        seed_aggregate(store, "p1", upvotes=2)

        # Act
        report = await reconciliation.reconcile(
            dry_run=True, product_ids=[ProductId("p1"), ProductId("p1")]
        )

        # Assert
        assert report.products_checked == 1
        assert len(report.drifts) == 1
        assert store.aggregates[ProductId("p1")].upvotes == 2

    @pytest.mark.asyncio
    async def test_unknown_product_is_consistent(self, unit_env):
        # Arrange
        reconciliation = await unit_env.get(ReconciliationService)

        # Act
        report = await reconciliation.reconcile(product_ids=[ProductId("missing")])

        # Assert
        assert report.consistent
        assert report.products_checked == 1
