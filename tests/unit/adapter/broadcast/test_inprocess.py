"""Unit tests for InProcessBroadcaster."""

import asyncio

import pytest

from tally.adapter.broadcast import InProcessBroadcaster
from tally.domain.error import BroadcastError
from tally.domain.model import VoteUpdate
from tally.domain.service import ALL_PRODUCTS
from tally.domain.value import ProductId, VoterId, VoteType


def update(product_id: str = "p1", version: int = 1, upvotes: int = 1) -> VoteUpdate:
    return VoteUpdate(
        product_id=ProductId(product_id),
        voter_id=VoterId("v1"),
        vote_type=VoteType.UP,
        upvotes=upvotes,
        downvotes=0,
        version=version,
    )


class TestPublish:
    """Tests for fan-out to subscribers."""

    @pytest.mark.asyncio
    async def test_product_subscriber_receives_only_its_product(self):
        # Arrange
        broadcaster = InProcessBroadcaster()

        async with broadcaster.subscribe("p1") as updates:
            # Act
            await broadcaster.publish("p2", update("p2"))
            await broadcaster.publish("p1", update("p1"))

            # Assert
            received = await asyncio.wait_for(anext(updates), timeout=1)
            assert received.product_id == "p1"
            assert updates.queue.empty()

    @pytest.mark.asyncio
    async def test_global_subscriber_receives_every_product(self):
        # Arrange
        broadcaster = InProcessBroadcaster()

        async with broadcaster.subscribe(ALL_PRODUCTS) as updates:
            # Act
            await broadcaster.publish("p1", update("p1"))
            await broadcaster.publish("p2", update("p2"))

            # Assert
            first = await asyncio.wait_for(anext(updates), timeout=1)
            second = await asyncio.wait_for(anext(updates), timeout=1)
            assert [first.product_id, second.product_id] == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_publish_without_subscribers_is_fine(self):
        broadcaster = InProcessBroadcaster()

        await broadcaster.publish("p1", update())

        assert broadcaster.subscriber_count("p1") == 0

    @pytest.mark.asyncio
    async def test_slow_subscriber_loses_oldest(self):
        # Arrange
        broadcaster = InProcessBroadcaster(queue_size=2)

        async with broadcaster.subscribe("p1") as updates:
            # Act
            for version in (1, 2, 3):
                await broadcaster.publish("p1", update(version=version))

            # Assert
            first = await asyncio.wait_for(anext(updates), timeout=1)
            second = await asyncio.wait_for(anext(updates), timeout=1)
            assert [first.version, second.version] == [2, 3]
            assert updates.dropped == 1


class TestLifecycle:
    """Subscription registration and shutdown."""

    @pytest.mark.asyncio
    async def test_subscription_removed_on_exit(self):
        broadcaster = InProcessBroadcaster()

        async with broadcaster.subscribe("p1"):
            assert broadcaster.subscriber_count("p1") == 1

        assert broadcaster.subscriber_count("p1") == 0

    @pytest.mark.asyncio
    async def test_close_ends_iteration(self):
        # Arrange
        broadcaster = InProcessBroadcaster()
        received: list[VoteUpdate] = []

        async with broadcaster.subscribe("p1") as updates:

            async def consume():
                async for message in updates:
                    received.append(message)

            consumer = asyncio.create_task(consume())
            await broadcaster.publish("p1", update())

            # Act
            await broadcaster.close()
            await asyncio.wait_for(consumer, timeout=1)

        # Assert
        assert len(received) == 1

    @pytest.mark.asyncio
    async def test_closed_broadcaster_rejects_publish_and_subscribe(self):
        # Arrange
        broadcaster = InProcessBroadcaster()
        await broadcaster.close()

        # Act & Assert
        with pytest.raises(BroadcastError):
            await broadcaster.publish("p1", update())
        with pytest.raises(BroadcastError):
            async with broadcaster.subscribe("p1"):
                pass
