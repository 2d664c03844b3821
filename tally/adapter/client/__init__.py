"""Vote API client with optimistic state."""

from tally.adapter.client.api import RemainingVotes, VoteApiClient
from tally.adapter.client.optimistic import OptimisticVote, VoteSnapshot

__all__ = ["OptimisticVote", "RemainingVotes", "VoteApiClient", "VoteSnapshot"]
