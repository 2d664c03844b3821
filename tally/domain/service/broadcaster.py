"""Real-time vote update fan-out port."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager

from tally.domain.model import VoteUpdate

# Channel receiving updates for every product
ALL_PRODUCTS = "*"


class Broadcaster(ABC):
    """Publishes committed vote updates to live subscribers.

    Delivery is at-most-once: slow subscribers lose messages and clients
    re-fetch canonical counts when they need them.
    """

    @abstractmethod
    async def publish(self, product_id: str, message: VoteUpdate) -> None:
        """Send an update to the product's subscribers and the global channel.

        Raises:
            BroadcastError: If the update could not be handed off
        """
        pass

    @abstractmethod
    def subscribe(
        self, product_id: str
    ) -> AbstractAsyncContextManager[AsyncIterator[VoteUpdate]]:
        """Listen to a product's updates, or every product's with ALL_PRODUCTS."""
        pass
