"""Reconciliation report models."""

from datetime import datetime

from pydantic import Field

from tally.domain.model.common import DomainModel
from tally.domain.value import ProductId, VoteCounts


class AggregateDrift(DomainModel):
    """Mismatch between a cached aggregate and the ledger."""

    product_id: ProductId
    stored: VoteCounts
    actual: VoteCounts

    @property
    def diff(self) -> VoteCounts:
        """Correction needed to reach the ledger truth (actual - stored)."""
        return self.actual - self.stored


class ReconciliationReport(DomainModel):
    """Summary of one reconciliation pass."""

    dry_run: bool
    records_scanned: int = 0
    products_checked: int = 0
    drifts: list[AggregateDrift] = Field(default_factory=list)
    repaired: int = 0
    started_at: datetime
    finished_at: datetime | None = None

    @property
    def consistent(self) -> bool:
        return not self.drifts
