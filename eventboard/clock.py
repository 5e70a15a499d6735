"""Injectable clock.

Every lead-time check and every stored timestamp goes through a clock
instead of calling ``datetime.now()`` directly, so services can be driven
deterministically from tests.
"""
from datetime import datetime

import pytz

from eventboard.config import settings


class SystemClock:
    """Wall clock in the configured service timezone.

    Timestamps are returned naive (tz stripped after conversion) because the
    stores keep local wall-clock values, matching the ``yyyy-MM-dd HH:mm:ss``
    strings exchanged with the stats service.
    """

    def __init__(self, tz_name: str = "UTC"):
        self.tz = pytz.timezone(tz_name)

    def now(self) -> datetime:
        return datetime.now(pytz.utc).astimezone(self.tz).replace(tzinfo=None, microsecond=0)


class FixedClock:
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def advance(self, delta) -> None:
        self.instant = self.instant + delta


_system_clock = SystemClock(settings.TIMEZONE)


def get_clock():
    """FastAPI dependency returning the process clock."""
    return _system_clock
