"""Real-time broadcast infrastructure provider."""

from collections.abc import AsyncIterator

from dishka import Scope, provide

from tally.adapter.broadcast import InProcessBroadcaster
from tally.config import BroadcastSettings
from tally.domain.service import Broadcaster
from tally.util.di.base import ProviderBase


class BroadcastProvider(ProviderBase):
    """In-process broadcaster shared by the whole app."""

    scope = Scope.APP

    @provide
    async def get_broadcaster(
        self, broadcast_settings: BroadcastSettings
    ) -> AsyncIterator[Broadcaster]:
        """Provide broadcaster, closing open subscriptions on shutdown."""
        broadcaster = InProcessBroadcaster(
            queue_size=broadcast_settings.subscriber_queue_size
        )
        yield broadcaster
        await broadcaster.close()
