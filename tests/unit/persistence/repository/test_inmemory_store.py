"""Unit tests for the in-memory vote store."""

import asyncio

import pytest

from tally.domain.error import ConcurrencyConflict
from tally.domain.model import VoteRecord
from tally.domain.repository import VoteKey
from tally.domain.value import ProductId, VoteCounts, VoterId, VoteType
from tally.persistence.repository.inmemory import InMemoryVoteStore
from tests.conftest import at, seed_aggregate

P1 = ProductId("p1")
V1 = VoterId("v1")


def record(voter_id: str, vote_type: VoteType = VoteType.UP) -> VoteRecord:
    return VoteRecord(product_id=P1, voter_id=VoterId(voter_id), vote_type=vote_type)


class TestTransaction:
    """Staged writes commit together or not at all."""

    @pytest.mark.asyncio
    async def test_commit_applies_all_writes(self):
        # Arrange
        store = InMemoryVoteStore()

        # Act
        async with store.transaction() as tx:
            await tx.votes.upsert(record("v1"))
            await tx.aggregates.apply_delta(P1, 1, 0)

        # Assert
        assert (P1, V1) in store.records
        assert store.aggregates[P1].upvotes == 1

    @pytest.mark.asyncio
    async def test_exception_discards_all_writes(self):
        # Arrange
        store = InMemoryVoteStore()

        # Act
        with pytest.raises(RuntimeError):
            async with store.transaction() as tx:
                await tx.votes.upsert(record("v1"))
                await tx.aggregates.apply_delta(P1, 1, 0)
                raise RuntimeError("boom")

        # Assert
        assert store.records == {}
        assert store.aggregates == {}

    @pytest.mark.asyncio
    async def test_reads_see_own_staged_writes(self):
        # Arrange
        store = InMemoryVoteStore()

        async with store.transaction() as tx:
            # Act
            await tx.votes.upsert(record("v1", VoteType.DOWN))
            staged = await tx.votes.get(P1, V1)
            counts = await tx.votes.count_by_product(P1)

            # Assert
            assert staged.vote_type == VoteType.DOWN
            assert counts == VoteCounts(downvotes=1)
            assert store.records == {}

    @pytest.mark.asyncio
    async def test_delete_staged_then_committed(self):
        # Arrange
        store = InMemoryVoteStore()
        async with store.transaction() as tx:
            await tx.votes.upsert(record("v1"))

        # Act
        async with store.transaction() as tx:
            deleted = await tx.votes.delete(P1, V1)
            missing = await tx.votes.delete(P1, V1)

        # Assert
        assert deleted is True
        assert missing is False
        assert store.records == {}

    @pytest.mark.asyncio
    async def test_upsert_keeps_created_at(self):
        # Arrange
        store = InMemoryVoteStore()
        original = record("v1").model_copy(update={"created_at": at(2024, 1, 1)})
        async with store.transaction() as tx:
            await tx.votes.upsert(original)

        # Act
        async with store.transaction() as tx:
            updated = await tx.votes.upsert(record("v1", VoteType.DOWN))

        # Assert
        assert updated.created_at == at(2024, 1, 1)
        assert store.records[(P1, V1)].vote_type == VoteType.DOWN


class TestLocks:
    """Key and product locks serialize transactions."""

    @pytest.mark.asyncio
    async def test_same_key_waits_for_holder(self):
        # Arrange
        store = InMemoryVoteStore()
        key = VoteKey(P1, V1)
        order: list[str] = []
        entered = asyncio.Event()

        async def first():
            async with store.transaction(key):
                entered.set()
                await asyncio.sleep(0.01)
                order.append("first")

        async def second():
            await entered.wait()
            async with store.transaction(key):
                order.append("second")

        # Act
        await asyncio.gather(first(), second())

        # Assert
        assert order == ["first", "second"]

    @pytest.mark.asyncio
    async def test_lock_timeout_raises_conflict(self):
        # Arrange
        store = InMemoryVoteStore(lock_timeout=0.01)
        key = VoteKey(P1, V1)

        async with store.transaction(key):
            # Act & Assert
            with pytest.raises(ConcurrencyConflict):
                async with store.transaction(key):
                    pass

    @pytest.mark.asyncio
    async def test_product_lock_is_reentrant_within_transaction(self):
        # Arrange
        store = InMemoryVoteStore(lock_timeout=0.01)

        # Act
        async with store.transaction() as tx:
            await tx.aggregates.get_for_update(P1)
            aggregate = await tx.aggregates.apply_delta(P1, 0, 1)

        # Assert
        assert aggregate.downvotes == 1

    @pytest.mark.asyncio
    async def test_locks_released_after_failure(self):
        # Arrange
        store = InMemoryVoteStore(lock_timeout=0.01)
        key = VoteKey(P1, V1)
        with pytest.raises(RuntimeError):
            async with store.transaction(key) as tx:
                await tx.aggregates.get_for_update(P1)
                raise RuntimeError("boom")

        # Act
        async with store.transaction(key) as tx:
            aggregate = await tx.aggregates.get_for_update(P1)

        # Assert
        assert aggregate.upvotes == 0


class TestAggregates:
    """Counter updates, clamping and rankings."""

    @pytest.mark.asyncio
    async def test_decrement_below_zero_is_clamped(self):
        # Arrange
        store = InMemoryVoteStore()
        seed_aggregate(store, "p1", upvotes=0, downvotes=2)

        # Act
        async with store.transaction() as tx:
            aggregate = await tx.aggregates.apply_delta(P1, -1, -1)

        # Assert
        assert (aggregate.upvotes, aggregate.downvotes) == (0, 1)
        assert aggregate.version == 1

    @pytest.mark.asyncio
    async def test_missing_product_reads_empty(self):
        store = InMemoryVoteStore()

        async with store.transaction() as tx:
            aggregate = await tx.aggregates.get(ProductId("nope"))
            exists = await tx.aggregates.exists(ProductId("nope"))

        assert aggregate.counts == VoteCounts()
        assert exists is False

    @pytest.mark.asyncio
    async def test_top_orders_by_score_then_upvotes_then_id(self):
        # Arrange
        store = InMemoryVoteStore()
        seed_aggregate(store, "c", upvotes=3, downvotes=1)
        seed_aggregate(store, "a", upvotes=2, downvotes=0)
        seed_aggregate(store, "b", upvotes=2, downvotes=0)
        seed_aggregate(store, "d", upvotes=5, downvotes=5)

        # Act
        async with store.transaction() as tx:
            first_page = await tx.aggregates.top(limit=3)
            second_page = await tx.aggregates.top(limit=3, offset=3)

        # Assert
        assert [a.product_id for a in first_page] == ["c", "a", "b"]
        assert [a.product_id for a in second_page] == ["d"]
