"""PostgreSQL implementation of the voter quota repository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from tally.domain.model import QuotaState
from tally.domain.repository import QuotaRepository
from tally.domain.value import VoterId
from tally.persistence.mappers import quota_state_to_dict, row_to_quota_state
from tally.persistence.repository.locks import advisory_xact_lock
from tally.persistence.tables import voter_quotas_table


class PostgresQuotaRepository(QuotaRepository):
    """PostgreSQL implementation of QuotaRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session (inside a transaction)
        """
        self.session = session

    async def get(self, voter_id: VoterId) -> Optional[QuotaState]:
        """Read a voter's quota."""
        stmt = select(voter_quotas_table).where(voter_quotas_table.c.voter_id == voter_id)
        result = await self.session.execute(stmt)
        row = result.fetchone()
        return row_to_quota_state(row._asdict()) if row else None

    async def get_for_update(self, voter_id: VoterId) -> Optional[QuotaState]:
        """Lock and read a voter's quota.

        An advisory lock covers voters that have no row yet.
        """
        await advisory_xact_lock(self.session, f"quota:{voter_id}")
        return await self.get(voter_id)

    async def save(self, state: QuotaState) -> QuotaState:
        """Create or overwrite a voter's quota."""
        values = quota_state_to_dict(state)
        stmt = insert(voter_quotas_table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["voter_id"],
            set_={
                "remaining": stmt.excluded.remaining,
                "window_reset_at": stmt.excluded.window_reset_at,
            },
        )
        await self.session.execute(stmt)
        return state
