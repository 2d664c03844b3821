#!/usr/bin/env python3
"""Apply the vote ledger schema with Logfire error tracking.

Usage:
    python scripts/run_migrations.py            # upgrade to head
    python scripts/run_migrations.py <revision> # upgrade to a given revision
"""

import sys
import logfire
from alembic import command
from alembic.config import Config

from tally.config import Settings
from tally.util.observability import configure_logfire


def main(argv: list[str] | None = None) -> int:
    """Upgrade the schema, logging failures to Logfire."""
    argv = sys.argv[1:] if argv is None else argv
    revision = argv[0] if argv else "head"
    settings = Settings()

    configure_logfire(settings, service_name="tally-migrations")

    if settings.storage.backend == "memory":
        logfire.info("In-memory vote store configured; no schema to migrate")
        return 0

    try:
        logfire.info("Migrating vote store schema", revision=revision)
        command.upgrade(Config("alembic.ini"), revision)
        logfire.info("Vote store schema is up to date", revision=revision)
        return 0

    except Exception as e:
        logfire.error(
            "Database migration failed",
            revision=revision,
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        # Re-raise so the deploy stops before serving votes on a stale schema
        raise


if __name__ == "__main__":
    sys.exit(main())
