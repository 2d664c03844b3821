"""Unit tests for the WebSocket update relay."""

import asyncio

import pytest
from fastapi import WebSocketDisconnect

from tally.adapter.broadcast import InProcessBroadcaster
from tally.domain.model import VoteUpdate
from tally.domain.value import ProductId
from tally.interface.api.routes.realtime import relay_updates


class FakeSocket:
    """Socket whose client side is driven by the test."""

    def __init__(self) -> None:
        self.accepted = asyncio.Event()
        self.inbound: asyncio.Queue[dict] = asyncio.Queue()
        self.sent: list[dict] = []
        self.closed = False
        self.fail_sends = False

    async def accept(self) -> None:
        self.accepted.set()

    async def receive(self) -> dict:
        return await self.inbound.get()

    async def send_json(self, data: dict) -> None:
        if self.fail_sends:
            raise WebSocketDisconnect(code=1006)
        self.sent.append(data)

    async def close(self) -> None:
        self.closed = True

    def disconnect(self) -> None:
        self.inbound.put_nowait({"type": "websocket.disconnect", "code": 1000})


def update(upvotes: int) -> VoteUpdate:
    return VoteUpdate(
        product_id=ProductId("p1"),
        voter_id="tag",
        vote_type=None,
        upvotes=upvotes,
        downvotes=0,
        version=upvotes,
    )


class TestRelayUpdates:
    """The relay forwards updates and ends with the connection."""

    @pytest.mark.asyncio
    async def test_quiet_channel_unsubscribes_on_disconnect(self):
        # Arrange
        broadcaster = InProcessBroadcaster()
        socket = FakeSocket()
        relay = asyncio.create_task(relay_updates(socket, broadcaster, "p1"))
        await asyncio.wait_for(socket.accepted.wait(), timeout=1)
        assert broadcaster.subscriber_count("p1") == 1

        # Act
        socket.disconnect()
        await asyncio.wait_for(relay, timeout=1)

        # Assert
        assert broadcaster.subscriber_count("p1") == 0
        assert socket.sent == []

    @pytest.mark.asyncio
    async def test_forwards_updates_as_json(self):
        # Arrange
        broadcaster = InProcessBroadcaster()
        socket = FakeSocket()
        relay = asyncio.create_task(relay_updates(socket, broadcaster, "p1"))
        await asyncio.wait_for(socket.accepted.wait(), timeout=1)

        # Act
        await broadcaster.publish("p1", update(3))
        while not socket.sent:
            await asyncio.sleep(0)
        socket.disconnect()
        await asyncio.wait_for(relay, timeout=1)

        # Assert
        assert socket.sent[0]["upvotes"] == 3
        assert socket.sent[0]["score"] == 3

    @pytest.mark.asyncio
    async def test_failed_send_ends_the_relay(self):
        # Arrange
        broadcaster = InProcessBroadcaster()
        socket = FakeSocket()
        socket.fail_sends = True
        relay = asyncio.create_task(relay_updates(socket, broadcaster, "p1"))
        await asyncio.wait_for(socket.accepted.wait(), timeout=1)

        # Act
        await broadcaster.publish("p1", update(1))
        await asyncio.wait_for(relay, timeout=1)

        # Assert
        assert broadcaster.subscriber_count("p1") == 0
        assert socket.closed is False

    @pytest.mark.asyncio
    async def test_broadcaster_shutdown_closes_socket(self):
        # Arrange
        broadcaster = InProcessBroadcaster()
        socket = FakeSocket()
        relay = asyncio.create_task(relay_updates(socket, broadcaster, "p1"))
        await asyncio.wait_for(socket.accepted.wait(), timeout=1)

        # Act
        await broadcaster.close()
        await asyncio.wait_for(relay, timeout=1)

        # Assert
        assert socket.closed is True
