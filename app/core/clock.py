"""
app/core/clock.py
Time source shared by the cache (TTL checks) and the scheduler (day boundary).
Tests substitute their own object with the same three methods.
"""

import time
from datetime import datetime

from app.core.config import TIMEZONE


class Clock:
    def __init__(self, tz=TIMEZONE):
        self.tz = tz

    def monotonic(self) -> float:
        return time.monotonic()

    def now(self) -> datetime:
        """Aware wall-clock time in the configured zone."""
        return datetime.now(self.tz)

    def today(self) -> str:
        """Calendar date in the configured zone, 'YYYY-MM-DD'."""
        return self.now().strftime("%Y-%m-%d")
