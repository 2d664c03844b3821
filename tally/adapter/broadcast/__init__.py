"""Real-time broadcast adapters."""

from tally.adapter.broadcast.inprocess import InProcessBroadcaster, Subscription

__all__ = ["InProcessBroadcaster", "Subscription"]
