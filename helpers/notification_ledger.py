import logging
from datetime import datetime
from typing import Optional

from tortoise.exceptions import IntegrityError

from helpers.reconciliation import LedgerConflict, LedgerReadError, LedgerWriteError
from models.notification import Notification


logger = logging.getLogger(__name__)


class NotificationLedger:
    """Append-only record of sent reminders, keyed by (quiet_hour_id, user_id).

    When no ledger connection is configured the ledger is disabled and the
    job skips its lookups and inserts.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    async def find(self, quiet_hour_id: int, user_id: int) -> Optional[Notification]:
        try:
            return await Notification.get_or_none(quiet_hour_id=quiet_hour_id, user_id=user_id)
        except Exception as e:
            raise LedgerReadError(f"Ledger lookup failed: {e}") from e

    async def record(self, quiet_hour_id: int, user_id: int, start_time: datetime,
                     end_time: datetime, sent_at: datetime) -> Notification:
        try:
            notification = await Notification.create(
                quiet_hour_id=quiet_hour_id,
                user_id=user_id,
                start_time=start_time,
                end_time=end_time,
                sent_at=sent_at,
            )
        except IntegrityError as e:
            raise LedgerConflict(f"Notification for quiet hour {quiet_hour_id} already recorded") from e
        except Exception as e:
            raise LedgerWriteError(f"Ledger insert failed: {e}") from e
        logger.info("Logged notification %s for quiet hour %s", notification.id, quiet_hour_id)
        return notification
