"""Domain value objects for the vote engine."""

from tally.domain.value.identifiers import ProductId, VoterId
from tally.domain.value.types import (
    QuotaDecision,
    VoteChoice,
    VoteCounts,
    VoterKind,
    VoteTransition,
    VoteType,
)

__all__ = [
    # Identifiers
    "ProductId",
    "VoterId",
    # Types
    "QuotaDecision",
    "VoteChoice",
    "VoteCounts",
    "VoterKind",
    "VoteTransition",
    "VoteType",
]
