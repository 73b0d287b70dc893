"""
app/core/batch.py
Concurrent fan-out of independent fetches, joined into one aggregate.
A key whose fetch fails maps to None; the batch itself still succeeds.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from app.core.fetcher import Fetcher

log = logging.getLogger("batch")


@dataclass
class AggregateRecord:
    records:   dict[str, Optional[dict]]
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    )

    @property
    def succeeded(self) -> list[str]:
        return [k for k, v in self.records.items() if v is not None]

    @property
    def failed(self) -> list[str]:
        return [k for k, v in self.records.items() if v is None]


class BatchFetcher:
    def __init__(self, fetcher: Fetcher):
        self.fetcher = fetcher

    async def fetch_all(
        self,
        keys: Iterable[str],
        url_for: Callable[[str], str],
        family: str,
        label: Callable[[str], str] = str,
    ) -> AggregateRecord:
        """
        keys are the aggregate's sub-keys (e.g. sign names). url_for and label
        are resolved for every key before anything is launched, so a bad key
        fails the whole batch up front and never half-way through.
        """
        keys  = list(keys)
        plans = [(k, label(k), url_for(k)) for k in keys]

        results = await asyncio.gather(
            *(self.fetcher.fetch(name, url, family) for _, name, url in plans),
            return_exceptions=True,
        )

        records: dict[str, Optional[dict]] = {}
        for key, result in zip(keys, results):
            if isinstance(result, Exception):
                log.warning(f"Batch: {key} failed ({result})")
                records[key] = None
            elif isinstance(result, BaseException):
                raise result
            else:
                records[key] = result

        agg = AggregateRecord(records)
        log.info(f"Batch: {len(agg.succeeded)}/{len(keys)} {family} records fetched")
        return agg
