"""Test configuration and fixtures."""

from datetime import datetime, timezone

import logfire
import pytest

from tally.domain.model import ProductAggregate, VoteRecord
from tally.domain.value import ProductId, VoterId, VoteType
from tally.persistence.repository.inmemory import InMemoryVoteStore

# Keep spans local; no console noise or network export during tests
logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def _memory_backend(monkeypatch):
    """Default every test to the in-memory store."""
    monkeypatch.setenv("STORAGE__BACKEND", "memory")
    monkeypatch.setenv("ENVIRONMENT", "test")


def seed_vote(
    store: InMemoryVoteStore, product_id: str, voter_id: str, vote_type: VoteType
) -> VoteRecord:
    """Write a ledger record directly, bypassing aggregates."""
    record = VoteRecord(
        product_id=ProductId(product_id),
        voter_id=VoterId(voter_id),
        vote_type=vote_type,
    )
    store.records[(record.product_id, record.voter_id)] = record
    return record


def seed_aggregate(
    store: InMemoryVoteStore, product_id: str, upvotes: int = 0, downvotes: int = 0
) -> ProductAggregate:
    """Write a cached aggregate directly, bypassing the ledger."""
    aggregate = ProductAggregate(
        product_id=ProductId(product_id), upvotes=upvotes, downvotes=downvotes
    )
    store.aggregates[aggregate.product_id] = aggregate
    return aggregate


def at(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    """UTC datetime shorthand."""
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
