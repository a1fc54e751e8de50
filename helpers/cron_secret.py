import os
from typing import Optional

from fastapi import Header, Query


def configured_cron_secret() -> Optional[str]:
    return os.getenv("CRON_SECRET") or None


def presented_cron_secret(
    secret: Optional[str] = Query(default=None),
    x_cron_secret: Optional[str] = Header(default=None),
) -> Optional[str]:
    """The trigger may pass the secret as ``?secret=`` or an ``x-cron-secret`` header."""
    return secret or x_cron_secret
