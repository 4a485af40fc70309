"""Standalone cron runner for the daily season status update.

This script is designed to run as a scheduled machine (once a day),
moving seasons along their lifecycle directly without going through
the HTTP API.

Usage:
    python -m app.cli.cron_runner

Exit codes:
    0 - Success
    1 - Failure (check logs for details)
"""

import asyncio
import logging
import sys
from datetime import datetime, timezone

from app.services.season_status_service import advance_season_statuses
from app.utils.db_async import SessionLocal, dispose_engine

# Configure logging for cron context
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("cron_runner")


async def main() -> int:
    """Run the season status update.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    start_time = datetime.now(timezone.utc)
    logger.info("Starting scheduled season status update")

    try:
        async with SessionLocal() as db:
            async with db.begin():
                result = await advance_season_statuses(db)

        elapsed = (datetime.now(timezone.utc) - start_time).total_seconds()

        logger.info(
            f"Status update complete in {elapsed:.1f}s: "
            f"{result.started} started, "
            f"{result.ended} ended"
        )
        return 0

    except Exception as e:
        elapsed = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.error(f"Status update failed after {elapsed:.1f}s: {e}", exc_info=True)
        return 1

    finally:
        await dispose_engine()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
