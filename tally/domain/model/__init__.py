"""Domain model entities for the vote engine."""

from tally.domain.model.aggregate import ProductAggregate
from tally.domain.model.quota import QuotaState
from tally.domain.model.reconciliation import AggregateDrift, ReconciliationReport
from tally.domain.model.result import VoteResult, VoteStatus, VoteUpdate
from tally.domain.model.vote import VotePlan, VoteRecord
from tally.domain.model.voter import Voter

__all__ = [
    "AggregateDrift",
    "ProductAggregate",
    "QuotaState",
    "ReconciliationReport",
    "VotePlan",
    "VoteRecord",
    "VoteResult",
    "VoteStatus",
    "VoteUpdate",
    "Voter",
]
