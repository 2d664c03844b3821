"""Real-time vote update WebSocket routes."""

import asyncio
from collections.abc import AsyncIterator

import logfire
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from tally.domain.model import VoteUpdate
from tally.domain.service import ALL_PRODUCTS, Broadcaster

router = APIRouter(tags=["realtime"])


async def _forward(websocket: WebSocket, updates: AsyncIterator[VoteUpdate]) -> None:
    async for update in updates:
        await websocket.send_json(update.model_dump(mode="json"))


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Subscribers never send anything meaningful; inbound frames are ignored
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def relay_updates(
    websocket: WebSocket, broadcaster: Broadcaster, channel: str
) -> None:
    """Forward broadcaster updates on a channel to the socket as JSON.

    Returns as soon as the client disconnects, even when the channel is
    quiet, so the subscription never outlives the connection.
    """
    with logfire.span("realtime.stream", channel=channel):
        # Subscribe before accepting so no update is missed after the handshake
        async with broadcaster.subscribe(channel) as updates:
            await websocket.accept()
            forward = asyncio.create_task(_forward(websocket, updates))
            disconnect = asyncio.create_task(_wait_for_disconnect(websocket))
            try:
                done, _ = await asyncio.wait(
                    {forward, disconnect}, return_when=asyncio.FIRST_COMPLETED
                )
            finally:
                forward.cancel()
                disconnect.cancel()
                await asyncio.gather(forward, disconnect, return_exceptions=True)

        error = None if disconnect in done else forward.exception()
        if disconnect in done or isinstance(error, WebSocketDisconnect):
            logfire.debug("Subscriber disconnected", channel=channel)
            return
        if error is not None:
            raise error

    # Broadcaster shut down
    await websocket.close()


async def _stream(websocket: WebSocket, channel: str) -> None:
    broadcaster = await websocket.app.state.dishka_container.get(Broadcaster)
    await relay_updates(websocket, broadcaster, channel)


@router.websocket("/ws/products/{product_id}/votes")
async def product_votes(websocket: WebSocket, product_id: str) -> None:
    """Stream vote updates for one product."""
    await _stream(websocket, product_id)


@router.websocket("/ws/votes")
async def all_votes(websocket: WebSocket) -> None:
    """Stream vote updates for every product."""
    await _stream(websocket, ALL_PRODUCTS)
