"""In-process vote update broadcaster.

Fans updates out to subscribers of the same process (WebSocket
connections served by this worker).
"""

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import logfire

from tally.domain.error import BroadcastError
from tally.domain.model import VoteUpdate
from tally.domain.service import ALL_PRODUCTS, Broadcaster


class Subscription:
    """Async iterator over one subscriber's queue.

    Iteration ends when the broadcaster is closed.
    """

    def __init__(self, channel: str, queue: "asyncio.Queue[VoteUpdate | None]") -> None:
        self.channel = channel
        self.queue = queue
        self.dropped = 0

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> VoteUpdate:
        message = await self.queue.get()
        if message is None:
            raise StopAsyncIteration
        return message

    def offer(self, message: VoteUpdate | None) -> None:
        """Enqueue without blocking, dropping the oldest message when full."""
        if self.queue.full():
            self.queue.get_nowait()
            self.dropped += 1
            logfire.debug(
                "Dropped vote update for slow subscriber",
                channel=self.channel,
                dropped=self.dropped,
            )
        self.queue.put_nowait(message)


class InProcessBroadcaster(Broadcaster):
    """Broadcaster backed by bounded asyncio queues.

    Publishing never waits on subscribers: a full queue loses its oldest
    message instead.
    """

    def __init__(self, queue_size: int = 100) -> None:
        """Initialize broadcaster.

        Args:
            queue_size: Buffered messages per subscriber
        """
        self.queue_size = queue_size
        self._subscriptions: defaultdict[str, set[Subscription]] = defaultdict(set)
        self._closed = False

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscriptions.get(channel, ()))

    async def publish(self, product_id: str, message: VoteUpdate) -> None:
        """Send an update to the product's and the global channel's subscribers."""
        if self._closed:
            raise BroadcastError("Broadcaster is closed")

        targets = [
            *self._subscriptions.get(product_id, ()),
            *self._subscriptions.get(ALL_PRODUCTS, ()),
        ]
        for subscription in targets:
            subscription.offer(message)

    @asynccontextmanager
    async def subscribe(self, product_id: str) -> AsyncIterator[Subscription]:
        """Register a subscriber for the duration of the block."""
        if self._closed:
            raise BroadcastError("Broadcaster is closed")

        subscription = Subscription(product_id, asyncio.Queue(maxsize=self.queue_size))
        self._subscriptions[product_id].add(subscription)
        try:
            yield subscription
        finally:
            subscribers = self._subscriptions.get(product_id)
            if subscribers is not None:
                subscribers.discard(subscription)
                if not subscribers:
                    del self._subscriptions[product_id]

    async def close(self) -> None:
        """Stop accepting updates and end every open subscription."""
        self._closed = True
        for subscribers in self._subscriptions.values():
            for subscription in subscribers:
                subscription.offer(None)
