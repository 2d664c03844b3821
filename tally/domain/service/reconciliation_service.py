"""Aggregate reconciliation domain service."""

import logfire

from tally.domain.model import AggregateDrift, ReconciliationReport
from tally.domain.repository import VoteStore
from tally.domain.value import ProductId
from tally.util.clock import utc_now

from .base import Service


class ReconciliationService(Service):
    """Recomputes product tallies from the vote ledger.

    Repairs drift left by crashes, clamped decrements or manual edits. The
    ledger is always the source of truth; cached aggregates are never used
    to compute the expected counts.
    """

    def __init__(self, store: VoteStore) -> None:
        """Initialize reconciliation service.

        Args:
            store: Vote store (ledger and aggregates)
        """
        self.store = store

    async def reconcile(
        self, dry_run: bool = False, product_ids: list[ProductId] | None = None
    ) -> ReconciliationReport:
        """Compare product aggregates with their ledger counts.

        Products with a cached tally but no votes are reset to zero. Each
        product is checked in its own transaction under the product lock, so
        live voting continues during a pass.

        Args:
            dry_run: Report drift without repairing it
            product_ids: Only check these products; every known product when None

        Returns:
            Report of the pass

        Raises:
            StorageError: If the ledger or aggregates cannot be read or written
        """
        report = ReconciliationReport(dry_run=dry_run, started_at=utc_now())

        with logfire.span(
            "reconciliation.reconcile", dry_run=dry_run, product_ids=product_ids
        ):
            candidates = await self._candidates(product_ids)
            drifts: list[AggregateDrift] = []
            records_scanned = 0
            repaired = 0

            for product_id in candidates:
                async with self.store.transaction() as tx:
                    if dry_run:
                        stored = await tx.aggregates.get(product_id)
                    else:
                        stored = await tx.aggregates.get_for_update(product_id)
                    actual = await tx.votes.count_by_product(product_id)
                    records_scanned += actual.upvotes + actual.downvotes

                    if stored.counts == actual:
                        continue

                    drift = AggregateDrift(
                        product_id=product_id, stored=stored.counts, actual=actual
                    )
                    drifts.append(drift)
                    logfire.warn(
                        "Aggregate drift detected",
                        product_id=product_id,
                        stored=drift.stored.model_dump(),
                        actual=drift.actual.model_dump(),
                        diff=drift.diff.model_dump(),
                    )

                    if not dry_run:
                        await tx.aggregates.replace(product_id, actual, utc_now())
                        repaired += 1

            report = report.model_copy(
                update={
                    "records_scanned": records_scanned,
                    "products_checked": len(candidates),
                    "drifts": drifts,
                    "repaired": repaired,
                    "finished_at": utc_now(),
                }
            )
            logfire.info(
                "Reconciliation finished",
                dry_run=dry_run,
                products_checked=report.products_checked,
                drifts=len(drifts),
                repaired=repaired,
            )
            return report

    async def _candidates(self, product_ids: list[ProductId] | None) -> list[ProductId]:
        if product_ids is not None:
            return sorted(set(product_ids))

        async with self.store.transaction() as tx:
            ledger_ids = await tx.votes.list_product_ids()
            aggregate_ids = await tx.aggregates.list_product_ids()
        return sorted(set(ledger_ids) | set(aggregate_ids))
