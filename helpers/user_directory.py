from typing import Optional

from helpers.reconciliation import DirectoryError
from models.user import User


class UserDirectory:
    async def get_email(self, user_id: int) -> Optional[str]:
        try:
            user = await User.get_or_none(id=user_id)
        except Exception as e:
            raise DirectoryError(f"Failed to load user {user_id}: {e}") from e
        return user.email if user else None
