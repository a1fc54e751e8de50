import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from helpers.cron_secret import configured_cron_secret, presented_cron_secret
from helpers.email import Mailer
from helpers.notification_ledger import NotificationLedger
from helpers.quiet_hour_store import QuietHourStore
from helpers.reconciliation import AuthorizationError, ListError, ReconciliationJob
from helpers.tortoise_config import ledger_enabled
from helpers.user_directory import UserDirectory


logger = logging.getLogger(__name__)

reconcile_router = APIRouter()


def get_reconciliation_job() -> ReconciliationJob:
    return ReconciliationJob(
        blocks=QuietHourStore(),
        ledger=NotificationLedger(enabled=ledger_enabled()),
        users=UserDirectory(),
        mailer=Mailer(),
        cron_secret=configured_cron_secret(),
    )


@reconcile_router.get("/reconcile")
async def reconcile(
    job: Annotated[ReconciliationJob, Depends(get_reconciliation_job)],
    secret: Annotated[Optional[str], Depends(presented_cron_secret)],
):
    try:
        summary = await job.run(secret)
    except AuthorizationError as e:
        return JSONResponse(status_code=401, content={"error": str(e)})
    except ListError as e:
        logger.error("Listing due quiet hours failed: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e)})
    return summary.to_response()
