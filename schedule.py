import asyncio
import logging
import os

from dotenv import load_dotenv
load_dotenv()

from controllers.reconcile_controller import get_reconciliation_job
from helpers.reconciliation import ReconciliationError
from helpers.tortoise_config import init_db, close_db


logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("quiet_hours.schedule")


async def run_once():
    job = get_reconciliation_job()
    try:
        summary = await job.run(job.cron_secret)
    except ReconciliationError as e:
        logger.error("Reconciliation pass failed: %s", e)
        return None
    except Exception:
        logger.exception("Unexpected error during reconciliation pass")
        return None
    logger.info("Pass result: %s", summary.to_response())
    return summary


async def main_loop():
    interval = int(os.getenv("RECONCILE_INTERVAL_SECONDS", "300"))
    await init_db()
    try:
        while True:
            await run_once()
            await asyncio.sleep(interval)
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(main_loop())
