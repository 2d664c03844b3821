"""Reconcile product aggregates with the vote ledger.

Usage:
    tally-reconcile            # repair drifted aggregates
    tally-reconcile --dry-run  # report drift only
    tally-reconcile -p p1 -p p2  # only check the named products

Exit status is 0 when the pass completed (whether or not repairs were
needed) and 1 when storage could not be read or written.
"""

import argparse
import asyncio
import sys
from collections.abc import Callable

import logfire
from dishka import AsyncContainer

from tally.application.usecase.reconciliation import (
    ReconcileAggregatesRequest,
    ReconcileAggregatesResponse,
    ReconcileAggregatesUseCase,
)
from tally.config import Settings
from tally.domain.error import StorageError
from tally.util.di.container import create_container
from tally.util.logging import get_logger, setup_logging
from tally.util.observability import configure_logfire

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tally-reconcile",
        description="Recompute product vote tallies from the vote ledger.",
    )
    parser.add_argument(
        "-d",
        "--dry-run",
        action="store_true",
        help="report drift without repairing it",
    )
    parser.add_argument(
        "-p",
        "--product",
        action="append",
        dest="products",
        metavar="PRODUCT_ID",
        help="only check this product (repeatable)",
    )
    return parser


async def run(
    container: AsyncContainer, dry_run: bool, products: list[str] | None = None
) -> ReconcileAggregatesResponse:
    """Run one reconciliation pass and close the container."""
    try:
        async with container() as request_container:
            use_case = await request_container.get(ReconcileAggregatesUseCase)
            return await use_case.execute(
                ReconcileAggregatesRequest(dry_run=dry_run, product_ids=products)
            )
    finally:
        await container.close()


def format_report(report: ReconcileAggregatesResponse) -> list[str]:
    mode = "dry run" if report.dry_run else "repair"
    lines = [
        f"Reconciliation ({mode}): checked {report.products_checked} products, "
        f"{report.records_scanned} vote records"
    ]
    for drift in report.drifts:
        lines.append(
            f"  {drift.product_id}: stored {drift.stored_upvotes}/{drift.stored_downvotes}"
            f" -> actual {drift.actual_upvotes}/{drift.actual_downvotes}"
            f" (diff {drift.upvotes_diff:+d}/{drift.downvotes_diff:+d})"
        )
    if report.consistent:
        lines.append("All aggregates match the ledger.")
    elif report.dry_run:
        lines.append(f"{len(report.drifts)} products drifted; rerun without --dry-run to repair.")
    else:
        lines.append(f"Repaired {report.repaired} products.")
    return lines


def main(
    argv: list[str] | None = None,
    container_factory: Callable[[], AsyncContainer] = create_container,
) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    settings = Settings()
    configure_logfire(settings, service_name="tally-reconcile")
    setup_logging(settings)

    try:
        report = asyncio.run(run(container_factory(), args.dry_run, args.products))
    except StorageError as e:
        logfire.error("Reconciliation failed", error=str(e), kind=e.kind)
        logger.error("Reconciliation failed: %s", e)
        return 1

    for line in format_report(report):
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
