"""Run one escalation sweep cycle and exit.

Intended for cron or any external scheduler that prefers a process over
the HTTP endpoint::

    python -m app.scripts.run_sweep
"""

import asyncio
import logging
import sys

from app.core.cache import CacheService
from app.core.config import settings
from app.core.database import AsyncSessionLocal, engine
from app.core.exceptions import SweepQueryError
from app.dependencies import get_redis_client
from app.services.escalation_sweep import run_escalation_sweep

logger = logging.getLogger(__name__)


async def main() -> int:
    redis_client = await get_redis_client()
    cache = CacheService(redis_client=redis_client)
    try:
        summary = await run_escalation_sweep(AsyncSessionLocal, cache=cache)
    except SweepQueryError as exc:
        logger.error("Sweep failed: %s", exc.detail)
        return 1
    finally:
        await engine.dispose()
        if redis_client is not None:
            await redis_client.aclose()

    print(
        f"overdue={summary['overdue_tasks_processed']} "
        f"reminders={summary['upcoming_reminders']} "
        f"escalations={summary['escalations_created']} "
        f"notifications={summary['notifications_created']} "
        f"skipped={summary['skipped']}"
    )
    if summary["side_effect_failures"]:
        print("failed: " + ", ".join(summary["side_effect_failures"]))
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    sys.exit(asyncio.run(main()))
