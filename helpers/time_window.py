from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import os

import pytz


DEFAULT_DISPLAY_TZ = "Asia/Kolkata"
DEFAULT_BUFFER = timedelta(minutes=5)
DEFAULT_HORIZON = timedelta(minutes=60)


def display_timezone(name: Optional[str] = None):
    return pytz.timezone(name or os.getenv("DISPLAY_TIMEZONE") or DEFAULT_DISPLAY_TZ)


def _minutes_from_env(key: str, default: timedelta) -> timedelta:
    value = os.getenv(key)
    if not value:
        return default
    return timedelta(minutes=int(value))


def default_buffer() -> timedelta:
    return _minutes_from_env("REMINDER_BUFFER_MINUTES", DEFAULT_BUFFER)


def default_horizon() -> timedelta:
    return _minutes_from_env("REMINDER_HORIZON_MINUTES", DEFAULT_HORIZON)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class DueWindow:
    start: datetime
    end: datetime
    display_tz: object = None

    @property
    def local_start(self) -> datetime:
        return self.start.astimezone(self.display_tz or display_timezone())

    @property
    def local_end(self) -> datetime:
        return self.end.astimezone(self.display_tz or display_timezone())

    def contains(self, moment: datetime) -> bool:
        return self.start <= as_utc(moment) <= self.end

    def describe(self) -> str:
        return (
            f"{self.start.isoformat()} -> {self.end.isoformat()} "
            f"({self.local_start.isoformat()} -> {self.local_end.isoformat()})"
        )


def compute_due_window(
    now: Optional[datetime] = None,
    buffer: Optional[timedelta] = None,
    horizon: Optional[timedelta] = None,
    display_tz=None,
) -> DueWindow:
    """Start times eligible for a reminder: [now - buffer, now + horizon], inclusive.

    Bounds are UTC, matching how block times are stored. The display zone is
    only carried along for log output.
    """
    now = as_utc(now) if now is not None else datetime.now(timezone.utc)
    buffer = default_buffer() if buffer is None else buffer
    horizon = default_horizon() if horizon is None else horizon
    return DueWindow(
        start=now - buffer,
        end=now + horizon,
        display_tz=display_tz or display_timezone(),
    )
