"""Injectable clock so planning code never reads the wall clock directly."""

from collections.abc import Callable
from datetime import datetime
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def system_clock(timezone: str = "UTC") -> Clock:
    """Return a clock producing aware datetimes in the given IANA zone."""
    zone = ZoneInfo(timezone)

    def now() -> datetime:
        return datetime.now(zone)

    return now


def fixed_clock(moment: datetime) -> Clock:
    """Return a clock frozen at ``moment`` (used by previews and tests)."""

    def now() -> datetime:
        return moment

    return now
