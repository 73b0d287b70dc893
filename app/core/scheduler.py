"""
app/core/scheduler.py
═══════════════════════════════════════════════════════════════════════════════
Daily background refresh:

  1. ONE scheduler task ever (duplicate start() is ignored)
  2. Runs immediately on start so the cache is warm before the first request
  3. Then fires once a day at DAILY_REFRESH_AT (wall clock, TIMEZONE)
  4. Each run force-refreshes today's panchangam and today's horoscope batch
     (the batch writes through to all twelve per-sign keys), then sweeps
     entries older than CACHE_RETENTION_S
  5. A failed run is logged and the loop carries on

Daily data changes meaning at the day boundary even if its TTL has not run
out, so the trigger ignores freshness.
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
import logging
from datetime import datetime, time as dtime, timedelta
from typing import Awaitable, Callable, Optional

from app.core.clock import Clock
from app.core.config import CACHE_RETENTION_S, DAILY_REFRESH_AT, parse_refresh_at
from app.core.keys import almanac_key, horoscopes_key
from app.core.orchestrator import RefreshOrchestrator

log = logging.getLogger("scheduler")


class DailyScheduler:
    def __init__(
        self,
        orchestrator: RefreshOrchestrator,
        clock: Optional[Clock] = None,
        refresh_at: str = DAILY_REFRESH_AT,
        retention_s: float = CACHE_RETENTION_S,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.orchestrator = orchestrator
        self.clock        = clock or Clock()
        self.hour, self.minute = parse_refresh_at(refresh_at)
        self.retention_s  = retention_s
        self._sleep       = sleep
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def daily_keys(self) -> list[str]:
        today = self.clock.today()
        return [almanac_key(today), horoscopes_key(today)]

    def seconds_until_next_run(self) -> float:
        now    = self.clock.now().replace(tzinfo=None)
        target = datetime.combine(now.date(), dtime(self.hour, self.minute))
        if target <= now:
            target += timedelta(days=1)
        return (target - now).total_seconds()

    def run_once(self) -> list[str]:
        """Trigger today's refreshes. Returns the keys actually started."""
        started = [k for k in self.daily_keys() if self.orchestrator.force_refresh(k)]
        swept = self.orchestrator.store.sweep(self.retention_s)
        if swept:
            log.info(f"Swept {swept} expired cache entries")
        return started

    def start(self) -> None:
        if self.running:
            log.warning("Scheduler already running — ignoring duplicate start")
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        log.info(f"Scheduler started (daily at {self.hour:02d}:{self.minute:02d} {self.clock.tz})")

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log.info("Scheduler stopped")

    async def _run(self) -> None:
        try:
            self.run_once()
        except Exception as ex:
            log.error(f"Startup refresh error: {ex}")

        while True:
            delay = self.seconds_until_next_run()
            log.debug(f"Next daily refresh in {delay:.0f}s")
            await self._sleep(delay)
            try:
                self.run_once()
            except Exception as ex:
                log.error(f"Daily refresh error (continuing): {ex}")
