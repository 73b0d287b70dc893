"""
app/core/cache.py
═══════════════════════════════════════════════════════════════════════════
Atomic in-memory cache with a per-entry lifecycle.
  • Entry states: LOADING / READY / FAILED (Missing = no entry at all)
  • Every operation runs under one threading lock → atomic, never partial
  • compare_and_set_loading() is the only way into LOADING, so at most one
    caller ever owns a refresh for a key
  • Expiry is logical: a stale READY entry stays servable, it only stops
    counting as fresh
  • FAILED keeps the last READY value → stale data stays valid
═══════════════════════════════════════════════════════════════════════════
"""

import enum
import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Optional

from app.core.config import CACHE_TTL_S


class EntryState(str, enum.Enum):
    LOADING = "loading"
    READY   = "ready"
    FAILED  = "failed"


@dataclass(frozen=True)
class CacheEntry:
    key:        str
    value:      Any
    state:      EntryState
    fetched_at: Optional[float]      # monotonic time of last READY write
    ttl:        float
    error:      Optional[str] = None
    created_at: Optional[float] = None   # monotonic time the key was first touched


def _last_touched(entry: CacheEntry) -> float:
    if entry.fetched_at is not None:
        return entry.fetched_at
    return entry.created_at if entry.created_at is not None else float("-inf")


class CacheStore:
    def __init__(self, clock=None, default_ttl: float = CACHE_TTL_S):
        self._clock       = clock
        self._default_ttl = default_ttl
        self._store: dict[str, CacheEntry] = {}
        self._lock  = threading.Lock()

    def _now(self) -> float:
        return self._clock.monotonic() if self._clock else time.monotonic()

    def get(self, key: str) -> Optional[CacheEntry]:
        """Entry snapshot, or None if the key was never touched."""
        with self._lock:
            return self._store.get(key)

    def set(
        self,
        key: str,
        value: Any,
        state: EntryState,
        ttl: Optional[float] = None,
        error: Optional[str] = None,
    ) -> CacheEntry:
        """
        Atomically replace the entry. READY stamps fetched_at; any other
        state keeps the previous fetched_at so age reporting stays honest.
        """
        with self._lock:
            prev = self._store.get(key)
            if state is EntryState.READY:
                fetched_at = self._now()
            else:
                fetched_at = prev.fetched_at if prev else None
            if ttl is None:
                ttl = prev.ttl if prev else self._default_ttl
            created_at = prev.created_at if prev else self._now()
            entry = CacheEntry(key, value, state, fetched_at, ttl, error, created_at)
            self._store[key] = entry
            return entry

    def compare_and_set_loading(self, key: str) -> bool:
        """
        Missing/READY/FAILED → LOADING. True only for the caller that made
        the transition; False if someone already holds LOADING.
        """
        with self._lock:
            prev = self._store.get(key)
            if prev is None:
                self._store[key] = CacheEntry(
                    key, None, EntryState.LOADING, None, self._default_ttl,
                    created_at=self._now(),
                )
                return True
            if prev.state is EntryState.LOADING:
                return False
            self._store[key] = replace(prev, state=EntryState.LOADING)
            return True

    def is_fresh(self, entry: CacheEntry) -> bool:
        if entry.fetched_at is None:
            return False
        return self._now() - entry.fetched_at < entry.ttl

    def sweep(self, retention_s: float) -> int:
        """
        Memory hygiene: drop entries whose last success (or creation, for
        never-successful ones) is older than retention_s. LOADING entries are
        owned by an in-flight refresh and are never dropped.
        """
        now = self._now()
        with self._lock:
            doomed = [
                k for k, e in self._store.items()
                if e.state is not EntryState.LOADING
                and now - _last_touched(e) >= retention_s
            ]
            for k in doomed:
                del self._store[k]
        return len(doomed)

    def summary(self) -> dict:
        """Metadata only — safe to expose in /health."""
        now = self._now()
        with self._lock:
            return {
                k: {
                    "state": e.state.value,
                    "age_s": round(now - e.fetched_at, 1) if e.fetched_at is not None else None,
                }
                for k, e in self._store.items()
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
