"""
app/core/sources.py
Knows how to load every cache key family:

  horoscope:<date>:<sign>  → Fetcher, one astrosage page
  horoscopes:<date>        → BatchFetcher, all twelve astrosage pages at once
  panchangam:<date>        → Fetcher, one panchangam page

astrosage only ever serves "today", so the date in a horoscope key names the
day the entry belongs to rather than a page to ask for.
"""

import logging
from typing import Any

from app.core.batch import AggregateRecord, BatchFetcher
from app.core.config import ASTROSAGE_URL, PANCHANGAM_URL, SIGNS
from app.core.errors import EmptyBatchError
from app.core.fetcher import Fetcher
from app.core.keys import ALMANAC, HOROSCOPES, SIGN, parse_key, sign_key

log = logging.getLogger("sources")


class DailySources:
    def __init__(
        self,
        fetcher: Fetcher,
        batch: BatchFetcher | None = None,
        signs: tuple[str, ...] = SIGNS,
        astrosage_url: str = ASTROSAGE_URL,
        panchangam_url: str = PANCHANGAM_URL,
    ):
        self.fetcher        = fetcher
        self.batch          = batch or BatchFetcher(fetcher)
        self.signs          = signs
        self.astrosage_url  = astrosage_url
        self.panchangam_url = panchangam_url

    def horoscope_url(self, sign: str) -> str:
        if sign not in self.signs:
            raise ValueError(f"Unknown zodiac sign: {sign!r}")
        return self.astrosage_url.format(sign=sign)

    def panchangam_url_for(self, date: str) -> str:
        return self.panchangam_url.format(date=date)

    async def load(self, key: str) -> Any:
        family, date, sign = parse_key(key)

        if family == SIGN:
            return await self.fetcher.fetch(key, self.horoscope_url(sign), SIGN)

        if family == HOROSCOPES:
            agg = await self.batch.fetch_all(
                self.signs, self.horoscope_url, SIGN,
                label=lambda s: sign_key(date, s),
            )
            if not agg.succeeded:
                raise EmptyBatchError(f"{key}: all {len(agg.records)} signs failed")
            return agg

        if family == ALMANAC:
            return await self.fetcher.fetch(key, self.panchangam_url_for(date), ALMANAC)

        raise ValueError(f"No loader for {key!r}")

    def related(self, key: str, value: Any) -> dict[str, Any]:
        """Per-sign entries carried by a freshly loaded aggregate."""
        if not isinstance(value, AggregateRecord):
            return {}
        date = parse_key(key).date
        return {
            sign_key(date, sign): record
            for sign, record in value.records.items()
            if record is not None
        }
