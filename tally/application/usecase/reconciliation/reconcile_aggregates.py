"""Reconcile aggregates use case."""

from datetime import datetime

from pydantic import BaseModel

from tally.application.usecase.base import BaseUseCase
from tally.domain.service import ReconciliationService
from tally.domain.value import ProductId


class DriftItem(BaseModel):
    """Product whose cached counts disagreed with the ledger."""

    product_id: str
    stored_upvotes: int
    stored_downvotes: int
    actual_upvotes: int
    actual_downvotes: int
    upvotes_diff: int
    downvotes_diff: int


class ReconcileAggregatesRequest(BaseModel):
    """Reconcile aggregates request."""

    dry_run: bool = False
    # None checks every product with votes or a cached tally
    product_ids: list[str] | None = None


class ReconcileAggregatesResponse(BaseModel):
    """Reconcile aggregates response."""

    dry_run: bool
    products_checked: int
    records_scanned: int
    drifts: list[DriftItem]
    repaired: int
    consistent: bool
    started_at: datetime
    finished_at: datetime | None


class ReconcileAggregatesUseCase(BaseUseCase):
    """Use case for recomputing product tallies from the vote ledger."""

    def __init__(self, reconciliation_service: ReconciliationService) -> None:
        self.reconciliation_service = reconciliation_service

    async def execute(
        self, request: ReconcileAggregatesRequest
    ) -> ReconcileAggregatesResponse:
        """Execute a reconciliation pass.

        Raises:
            StorageError: If the ledger or aggregates cannot be read or written
        """
        product_ids = (
            [ProductId(product_id) for product_id in request.product_ids]
            if request.product_ids is not None
            else None
        )
        report = await self.reconciliation_service.reconcile(
            dry_run=request.dry_run, product_ids=product_ids
        )

        return ReconcileAggregatesResponse(
            dry_run=report.dry_run,
            products_checked=report.products_checked,
            records_scanned=report.records_scanned,
            drifts=[
                DriftItem(
                    product_id=drift.product_id,
                    stored_upvotes=drift.stored.upvotes,
                    stored_downvotes=drift.stored.downvotes,
                    actual_upvotes=drift.actual.upvotes,
                    actual_downvotes=drift.actual.downvotes,
                    upvotes_diff=drift.diff.upvotes,
                    downvotes_diff=drift.diff.downvotes,
                )
                for drift in report.drifts
            ],
            repaired=report.repaired,
            consistent=report.consistent,
            started_at=report.started_at,
            finished_at=report.finished_at,
        )
