"""PostgreSQL implementation of the product aggregate repository."""

from datetime import datetime
from typing import List

import logfire
from sqlalchemy import exists, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from tally.domain.model import ProductAggregate
from tally.domain.repository import AggregateRepository
from tally.domain.value import ProductId, VoteCounts
from tally.persistence.mappers import row_to_aggregate
from tally.persistence.tables import product_aggregates_table
from tally.util.clock import utc_now


class PostgresAggregateRepository(AggregateRepository):
    """PostgreSQL implementation of AggregateRepository.

    Mutations lock the product row (SELECT ... FOR UPDATE) so concurrent
    casts on one product serialize only at the counter step.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session (inside a transaction)
        """
        self.session = session

    async def get(self, product_id: ProductId) -> ProductAggregate:
        """Get a product's tally (empty if none)."""
        stmt = select(product_aggregates_table).where(
            product_aggregates_table.c.product_id == product_id
        )
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_aggregate(row._asdict()) if row else ProductAggregate.empty(product_id)

    async def get_for_update(self, product_id: ProductId) -> ProductAggregate:
        """Lock and get a product's tally, registering it if needed."""
        await self._insert_if_missing(product_id)
        stmt = (
            select(product_aggregates_table)
            .where(product_aggregates_table.c.product_id == product_id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return row_to_aggregate(result.one()._asdict())

    async def exists(self, product_id: ProductId) -> bool:
        """Check whether a product is registered."""
        stmt = select(
            exists().where(product_aggregates_table.c.product_id == product_id)
        )
        result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def ensure(self, product_id: ProductId) -> ProductAggregate:
        """Register a product with an empty tally."""
        await self._insert_if_missing(product_id)
        return await self.get(product_id)

    async def _insert_if_missing(self, product_id: ProductId) -> None:
        stmt = (
            insert(product_aggregates_table)
            .values(product_id=product_id, upvotes=0, downvotes=0, version=0)
            .on_conflict_do_nothing(index_elements=["product_id"])
        )
        await self.session.execute(stmt)

    async def apply_delta(
        self, product_id: ProductId, up_delta: int, down_delta: int
    ) -> ProductAggregate:
        """Adjust a product's counters under the row lock, clamping at zero."""
        with logfire.span(
            "aggregate_repository.apply_delta",
            product_id=product_id,
            up_delta=up_delta,
            down_delta=down_delta,
        ):
            current = await self.get_for_update(product_id)

            upvotes = current.upvotes + up_delta
            downvotes = current.downvotes + down_delta
            if upvotes < 0 or downvotes < 0:
                logfire.warn(
                    "Aggregate counter clamped at zero",
                    product_id=product_id,
                    upvotes=upvotes,
                    downvotes=downvotes,
                )

            stmt = (
                update(product_aggregates_table)
                .where(product_aggregates_table.c.product_id == product_id)
                .values(
                    upvotes=max(upvotes, 0),
                    downvotes=max(downvotes, 0),
                    version=product_aggregates_table.c.version + 1,
                    updated_at=utc_now(),
                )
                .returning(product_aggregates_table)
            )
            result = await self.session.execute(stmt)
            return row_to_aggregate(result.one()._asdict())

    async def replace(
        self, product_id: ProductId, counts: VoteCounts, reconciled_at: datetime
    ) -> ProductAggregate:
        """Overwrite a product's counters with recomputed values."""
        await self.get_for_update(product_id)
        stmt = (
            update(product_aggregates_table)
            .where(product_aggregates_table.c.product_id == product_id)
            .values(
                upvotes=counts.upvotes,
                downvotes=counts.downvotes,
                version=product_aggregates_table.c.version + 1,
                updated_at=reconciled_at,
                reconciled_at=reconciled_at,
            )
            .returning(product_aggregates_table)
        )
        result = await self.session.execute(stmt)
        return row_to_aggregate(result.one()._asdict())

    async def list_product_ids(self) -> List[ProductId]:
        """List products with a stored aggregate."""
        stmt = select(product_aggregates_table.c.product_id).order_by(
            product_aggregates_table.c.product_id
        )
        result = await self.session.execute(stmt)
        return [ProductId(row.product_id) for row in result.fetchall()]

    async def top(self, limit: int = 30, offset: int = 0) -> List[ProductAggregate]:
        """List aggregates by score."""
        table = product_aggregates_table
        stmt = (
            select(table)
            .order_by(
                (table.c.upvotes - table.c.downvotes).desc(),
                table.c.upvotes.desc(),
                table.c.product_id.asc(),
            )
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return [row_to_aggregate(row._asdict()) for row in result.fetchall()]
