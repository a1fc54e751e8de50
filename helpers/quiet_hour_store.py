import logging
from datetime import datetime, timezone
from typing import List, Optional

from helpers.reconciliation import FlagUpdateError, ListError
from helpers.time_window import DueWindow
from models.quiet_hour import QuietHour


logger = logging.getLogger(__name__)


class QuietHourStore:
    """Block repository over the ``quiet_hours`` table."""

    async def list_due(self, window: DueWindow) -> List[QuietHour]:
        try:
            return await QuietHour.filter(
                notified=False,
                start_time__gte=window.start,
                start_time__lte=window.end,
            )
        except Exception as e:
            raise ListError(f"Failed to list due quiet hours: {e}") from e

    async def mark_notified(self, block_id: int):
        try:
            await QuietHour.filter(id=block_id).update(notified=True)
        except Exception as e:
            raise FlagUpdateError(f"Failed to update quiet hour {block_id}: {e}") from e

    async def create(self, user_id: int, start_time: datetime, end_time: datetime) -> QuietHour:
        return await QuietHour.create(user_id=user_id, start_time=start_time, end_time=end_time)

    async def list_for_user(self, user_id: int) -> List[QuietHour]:
        return await QuietHour.filter(user_id=user_id).order_by("start_time")

    async def delete(self, user_id: int, block_id: int) -> bool:
        deleted = await QuietHour.filter(id=block_id, user_id=user_id).delete()
        return deleted > 0

    async def sweep_expired(self, user_id: int, now: Optional[datetime] = None) -> List[int]:
        """Remove the user's blocks that have already ended. Never raises."""
        now = now or datetime.now(timezone.utc)
        try:
            ids = await QuietHour.filter(user_id=user_id, end_time__lte=now).values_list("id", flat=True)
            if not ids:
                return []
            await QuietHour.filter(id__in=ids).delete()
            logger.info("Removed expired quiet hours: %s", ", ".join(str(i) for i in ids))
            return list(ids)
        except Exception as e:
            logger.error("Error deleting expired quiet hours for user %s: %s", user_id, e)
            return []
