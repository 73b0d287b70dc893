"""
app/core/orchestrator.py
═══════════════════════════════════════════════════════════════════════════════
Refresh-ahead front door to the cache. Guarantees:

  1. Fresh READY entry      → served as-is, zero network
  2. Stale / missing / FAILED → whoever wins compare_and_set_loading() starts
     ONE background refresh; everybody gets the best value available right now
  3. LOADING                → served as-is, never a second fetch for the key
  4. Failed refresh         → entry FAILED, previous value kept and still served
  5. Every write (request-triggered or scheduled) goes through _refresh()

Per-key cycle:  Missing → LOADING → READY | FAILED → LOADING → ...
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from app.core.cache import CacheEntry, CacheStore, EntryState
from app.core.errors import DataSourceError

log = logging.getLogger("orchestrator")

Loader  = Callable[[str], Awaitable[Any]]
Related = Callable[[str, Any], dict[str, Any]]


class RefreshOrchestrator:
    def __init__(self, store: CacheStore, load: Loader, related: Optional[Related] = None):
        self.store    = store
        self._load    = load
        self._related = related
        self._tasks: set[asyncio.Task] = set()

    def get(self, key: str) -> tuple[Any, bool]:
        """
        (value, is_loading). Never waits on the network; must be called from
        inside the event loop so a background refresh can be scheduled.
        """
        entry = self.store.get(key)
        if entry is not None:
            if entry.state is EntryState.READY and self.store.is_fresh(entry):
                return entry.value, False
            if entry.state is EntryState.LOADING:
                return entry.value, True

        if self.store.compare_and_set_loading(key):
            reason = entry.state.value if entry else "missing"
            log.info(f"{key}: {reason} → refreshing in background")
            self._spawn(key)
        else:
            log.debug(f"{key}: refresh already in flight")

        current = self.store.get(key)
        return (current.value if current else None), True

    def force_refresh(self, key: str) -> bool:
        """Refresh regardless of freshness. False if one is already in flight."""
        if not self.store.compare_and_set_loading(key):
            log.info(f"{key}: forced refresh skipped, already loading")
            return False
        log.info(f"{key}: forced refresh")
        self._spawn(key)
        return True

    def entry(self, key: str) -> Optional[CacheEntry]:
        return self.store.get(key)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every background refresh has settled."""
        while self._tasks:
            await asyncio.wait(list(self._tasks))

    async def cancel_all(self) -> int:
        """
        Cancel every background refresh and wait for it to release its key.
        Cancelled keys end FAILED with their previous value.
        """
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        return len(tasks)

    # ── internals ─────────────────────────────────────────────────────────────

    def _spawn(self, key: str) -> None:
        task = asyncio.get_running_loop().create_task(self._refresh(key))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh(self, key: str) -> None:
        prev     = self.store.get(key)
        previous = prev.value if prev else None

        try:
            value = await self._load(key)
        except DataSourceError as ex:
            log.error(f"{key}: refresh failed: {ex}")
            self._fail(key, previous, ex)
            return
        except asyncio.CancelledError:
            self._fail(key, previous, "cancelled")
            raise
        except Exception as ex:
            log.exception(f"{key}: unexpected refresh error: {ex}")
            self._fail(key, previous, ex)
            return

        self.store.set(key, value, EntryState.READY)
        log.info(f"{key}: refreshed")

        if self._related:
            for sub_key, sub_value in self._related(key, value).items():
                if self.store.compare_and_set_loading(sub_key):
                    self.store.set(sub_key, sub_value, EntryState.READY)
                else:
                    log.debug(f"{sub_key}: own refresh in flight, not overwritten")

    def _fail(self, key: str, previous: Any, cause) -> None:
        self.store.set(key, previous, EntryState.FAILED, error=str(cause))
        if previous is not None:
            log.warning(f"{key}: keeping last good value")
