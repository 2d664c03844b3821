"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict

from tally.domain.model import ProductAggregate, QuotaState, VoteRecord
from tally.domain.value import ProductId, VoterId, VoteType


def row_to_vote_record(row: Dict[str, Any]) -> VoteRecord:
    """Convert database row to VoteRecord domain model.

    Args:
        row: Database row as dict

    Returns:
        VoteRecord domain model
    """
    return VoteRecord(
        product_id=ProductId(row["product_id"]),
        voter_id=VoterId(row["voter_id"]),
        vote_type=VoteType(row["vote_type"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def vote_record_to_dict(record: VoteRecord) -> Dict[str, Any]:
    """Convert VoteRecord domain model to database dict.

    Args:
        record: VoteRecord domain model

    Returns:
        Dict suitable for database insertion/update
    """
    return {
        "product_id": record.product_id,
        "voter_id": record.voter_id,
        "vote_type": record.vote_type.value,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


def row_to_aggregate(row: Dict[str, Any]) -> ProductAggregate:
    """Convert database row to ProductAggregate domain model."""
    return ProductAggregate(
        product_id=ProductId(row["product_id"]),
        upvotes=row["upvotes"],
        downvotes=row["downvotes"],
        version=row["version"],
        updated_at=row["updated_at"],
        reconciled_at=row.get("reconciled_at"),
    )


def row_to_quota_state(row: Dict[str, Any]) -> QuotaState:
    """Convert database row to QuotaState domain model."""
    return QuotaState(
        voter_id=VoterId(row["voter_id"]),
        remaining=row["remaining"],
        window_reset_at=row["window_reset_at"],
    )


def quota_state_to_dict(state: QuotaState) -> Dict[str, Any]:
    """Convert QuotaState domain model to database dict."""
    return state.model_dump()
