"""
Cleanup task: delete every expired short URL.

Redirects already delete expired links lazily; this sweeps the ones nobody
visits. Schedule it externally (cron, k8s CronJob, ...).

Usage:
    python -m shortlink_app.cleanup
"""

import asyncio
import logging

from shortlink_app.database.connection import engine, init_db
from shortlink_app.dependencies import get_url_service
from shortlink_app.utils.logging import initialize_logging


logger = logging.getLogger(__name__)


async def run_cleanup() -> int:
    """Run the expired-link sweep once. Returns the number of deleted links."""
    await init_db()
    try:
        return await get_url_service().cleanup_expired()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    initialize_logging()
    total_cleaned = asyncio.run(run_cleanup())
    logger.info("Total cleaned URLs: %d", total_cleaned)
