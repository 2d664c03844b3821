"""PostgreSQL implementation of the vote ledger repository."""

from typing import List, Optional

from sqlalchemy import and_, delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from tally.domain.model import VoteRecord
from tally.domain.repository import VoteRepository
from tally.domain.value import ProductId, VoteCounts, VoterId, VoteType
from tally.persistence.mappers import row_to_vote_record, vote_record_to_dict
from tally.persistence.tables import vote_records_table


class PostgresVoteRepository(VoteRepository):
    """PostgreSQL implementation of VoteRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session (inside a transaction)
        """
        self.session = session

    async def get(self, product_id: ProductId, voter_id: VoterId) -> Optional[VoteRecord]:
        """Find a voter's vote on a product."""
        stmt = select(vote_records_table).where(
            and_(
                vote_records_table.c.product_id == product_id,
                vote_records_table.c.voter_id == voter_id,
            )
        )
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_vote_record(row._asdict()) if row else None

    async def upsert(self, record: VoteRecord) -> VoteRecord:
        """Create a vote record or update its type in place."""
        stmt = insert(vote_records_table).values(**vote_record_to_dict(record))
        stmt = stmt.on_conflict_do_update(
            constraint="pk_vote_records",
            set_={
                "vote_type": stmt.excluded.vote_type,
                "updated_at": stmt.excluded.updated_at,
            },
        ).returning(vote_records_table)
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_vote_record(row._asdict())  # type: ignore[union-attr]

    async def delete(self, product_id: ProductId, voter_id: VoterId) -> bool:
        """Delete a voter's vote on a product."""
        stmt = delete(vote_records_table).where(
            and_(
                vote_records_table.c.product_id == product_id,
                vote_records_table.c.voter_id == voter_id,
            )
        )
        result = await self.session.execute(stmt)
        return result.rowcount > 0  # type: ignore[attr-defined]

    async def list_by_product(self, product_id: ProductId) -> List[VoteRecord]:
        """List every vote on a product."""
        stmt = select(vote_records_table).where(
            vote_records_table.c.product_id == product_id
        )
        result = await self.session.execute(stmt)
        return [row_to_vote_record(row._asdict()) for row in result.fetchall()]

    async def list_by_voter(self, voter_id: VoterId) -> List[VoteRecord]:
        """List every vote a voter holds."""
        stmt = (
            select(vote_records_table)
            .where(vote_records_table.c.voter_id == voter_id)
            .order_by(vote_records_table.c.product_id)
        )
        result = await self.session.execute(stmt)
        return [row_to_vote_record(row._asdict()) for row in result.fetchall()]

    async def list_product_ids(self) -> List[ProductId]:
        """List products with at least one vote."""
        stmt = (
            select(vote_records_table.c.product_id)
            .distinct()
            .order_by(vote_records_table.c.product_id)
        )
        result = await self.session.execute(stmt)
        return [ProductId(row.product_id) for row in result.fetchall()]

    async def count_by_product(self, product_id: ProductId) -> VoteCounts:
        """Count votes on a product grouped by type."""
        stmt = (
            select(vote_records_table.c.vote_type, func.count().label("total"))
            .where(vote_records_table.c.product_id == product_id)
            .group_by(vote_records_table.c.vote_type)
        )
        result = await self.session.execute(stmt)
        totals = {VoteType(row.vote_type): row.total for row in result.fetchall()}
        return VoteCounts(
            upvotes=totals.get(VoteType.UP, 0),
            downvotes=totals.get(VoteType.DOWN, 0),
        )
