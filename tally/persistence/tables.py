"""SQLAlchemy table definitions for the vote engine.

These table definitions are used with SQLAlchemy Core.
They match the schema defined in Alembic migrations.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Enum,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP

# Metadata object for all tables
metadata = MetaData()

# Voter ids are stored with their "anon:" or "user:" namespace prefix
VOTER_KEY_LENGTH = 260

# ============================================================================
# VOTE_RECORDS TABLE (ledger, source of truth)
# ============================================================================
vote_records_table = Table(
    "vote_records",
    metadata,
    Column("product_id", String(255), nullable=False),
    Column("voter_id", String(VOTER_KEY_LENGTH), nullable=False),
    Column(
        "vote_type",
        Enum("up", "down", name="vote_type", create_type=False),
        nullable=False,
    ),
    Column(
        "created_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    # One vote per voter per product
    PrimaryKeyConstraint("product_id", "voter_id", name="pk_vote_records"),
)

Index("idx_vote_records_voter_id", vote_records_table.c.voter_id)

# ============================================================================
# PRODUCT_AGGREGATES TABLE (cached tallies, repaired by reconciliation)
# ============================================================================
product_aggregates_table = Table(
    "product_aggregates",
    metadata,
    Column("product_id", String(255), primary_key=True),
    Column("upvotes", Integer, nullable=False, server_default="0"),
    Column("downvotes", Integer, nullable=False, server_default="0"),
    Column("version", Integer, nullable=False, server_default="0"),
    Column(
        "updated_at", TIMESTAMP(timezone=True), nullable=False, server_default="NOW()"
    ),
    Column("reconciled_at", TIMESTAMP(timezone=True), nullable=True),
    CheckConstraint("upvotes >= 0", name="upvotes_non_negative"),
    CheckConstraint("downvotes >= 0", name="downvotes_non_negative"),
)

# ============================================================================
# VOTER_QUOTAS TABLE (anonymous voters only)
# ============================================================================
voter_quotas_table = Table(
    "voter_quotas",
    metadata,
    Column("voter_id", String(VOTER_KEY_LENGTH), primary_key=True),
    Column("remaining", Integer, nullable=False),
    Column("window_reset_at", TIMESTAMP(timezone=True), nullable=False),
    CheckConstraint("remaining >= 0", name="remaining_non_negative"),
)
