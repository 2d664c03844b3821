"""initial_schema

Create the vote engine schema:
- Vote records (ledger, one row per voter per product)
- Product aggregates (cached up/down tallies)
- Voter quotas (anonymous voter allowances)

Revision ID: 3c9e1f0a7b24
Revises:
Create Date: 2026-10-19 10:12:44.518203

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "3c9e1f0a7b24"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Create ENUM types (idempotent)
    op.execute("""
        DO $$ BEGIN
            CREATE TYPE vote_type AS ENUM ('up', 'down');
        EXCEPTION
            WHEN duplicate_object THEN null;
        END $$;
    """)

    # ========================================================================
    # VOTE_RECORDS table (ledger)
    # ========================================================================
    op.create_table(
        "vote_records",
        sa.Column("product_id", sa.String(255), nullable=False),
        sa.Column("voter_id", sa.String(260), nullable=False),
        sa.Column(
            "vote_type",
            postgresql.ENUM("up", "down", name="vote_type", create_type=False),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.PrimaryKeyConstraint("product_id", "voter_id", name="pk_vote_records"),
    )
    # Reset-by-voter lookups; product lookups use the primary key prefix
    op.create_index("idx_vote_records_voter_id", "vote_records", ["voter_id"])

    # ========================================================================
    # PRODUCT_AGGREGATES table
    # ========================================================================
    op.create_table(
        "product_aggregates",
        sa.Column("product_id", sa.String(255), nullable=False),
        sa.Column("upvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("downvotes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("reconciled_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("product_id"),
        sa.CheckConstraint("upvotes >= 0", name="upvotes_non_negative"),
        sa.CheckConstraint("downvotes >= 0", name="downvotes_non_negative"),
    )
    op.create_index(
        "idx_product_aggregates_score",
        "product_aggregates",
        [sa.text("(upvotes - downvotes) DESC"), sa.text("upvotes DESC"), "product_id"],
    )

    # ========================================================================
    # VOTER_QUOTAS table
    # ========================================================================
    op.create_table(
        "voter_quotas",
        sa.Column("voter_id", sa.String(260), nullable=False),
        sa.Column("remaining", sa.Integer(), nullable=False),
        sa.Column("window_reset_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("voter_id"),
        sa.CheckConstraint("remaining >= 0", name="remaining_non_negative"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("voter_quotas")
    op.drop_index("idx_product_aggregates_score", table_name="product_aggregates")
    op.drop_table("product_aggregates")
    op.drop_index("idx_vote_records_voter_id", table_name="vote_records")
    op.drop_table("vote_records")

    op.execute("DROP TYPE IF EXISTS vote_type")
