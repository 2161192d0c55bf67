"""
Scheduled Jobs

Entry points meant to be run by cron or a scheduler, e.g.:

    python -m api.jobs recurring
"""

import argparse
import logging
import os
import sys

from .database import init_db
from . import services

logger = logging.getLogger(__name__)


def run_recurring_job() -> int:
    """Create due recurring transactions.

    Returns:
        Number of transactions created
    """
    init_db()
    result = services.run_recurring_transactions()
    logger.info(f"Recurring job finished: {result.to_dict()}")
    return result.created_count


JOBS = {
    "recurring": run_recurring_job,
}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a finance tracker background job")
    parser.add_argument("job", choices=sorted(JOBS), nargs="?", default="recurring")
    args = parser.parse_args(argv)

    try:
        JOBS[args.job]()
    except Exception as e:
        logger.error(f"Job {args.job} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    sys.exit(main())
