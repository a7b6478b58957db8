"""
Time source and working-day helpers.

The clock is a FastAPI dependency (``get_clock``) so tests can pin "now"
through ``app.dependency_overrides``.
"""

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from workforce.core.config import settings
from workforce.core.errors import ValidationError


class Clock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock frozen at a given aware instant."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires an aware datetime")
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


_system_clock = Clock()


def get_clock() -> Clock:
    return _system_clock


def resolve_timezone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or settings.DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone '{name}'")


def to_local(instant: datetime, tz: ZoneInfo) -> datetime:
    """Aware instant -> wall-clock time in tz. Naive input is taken as already local."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=tz)
    return instant.astimezone(tz)


def working_day(instant: datetime, tz: ZoneInfo) -> date:
    return to_local(instant, tz).date()


def parse_hhmm(value: str) -> time:
    try:
        return datetime.strptime(value.strip(), "%H:%M").time()
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")
