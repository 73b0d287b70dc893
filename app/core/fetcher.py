"""
app/core/fetcher.py
═══════════════════════════════════════════════════════════════════════════════
One source fetch for one cache key.

  1. GET the page with a hard per-attempt deadline (FETCH_TIMEOUT_S)
  2. NetworkError / FetchTimeoutError → retry, sleeping retry_index × backoff
     (1s, 2s, 3s with the defaults), at most 1 + max_retries attempts
  3. Budget spent → ExhaustedRetries carrying the last cause
  4. Page fetched → Extractor; a ParseError degrades to the family's
     empty-shaped record instead of failing the fetch

The Fetcher never touches the cache. Its caller decides what to write.
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from app.core.config import FETCH_TIMEOUT_S, MAX_RETRIES, RETRY_BACKOFF_S
from app.core.errors import RETRYABLE, ExhaustedRetries, ParseError
from app.core.http_client import get_text, plain_client
from app.scrapers.extract import empty_record, extract

log = logging.getLogger("fetcher")


class Fetcher:
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        extractor: Callable[[str, str], dict] = extract,
        max_retries: int = MAX_RETRIES,
        backoff_s: float = RETRY_BACKOFF_S,
        timeout_s: float = FETCH_TIMEOUT_S,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client     = client
        self._extract    = extractor
        self.max_retries = max_retries
        self.backoff_s   = backoff_s
        self.timeout_s   = timeout_s
        self._sleep      = sleep

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client or plain_client()

    async def fetch(self, key: str, url: str, family: str) -> dict:
        markup = await self._download(key, url)
        try:
            return self._extract(markup, family)
        except ParseError as ex:
            log.warning(f"{key}: partial page, serving empty fields ({ex})")
            return empty_record(family)

    async def _download(self, key: str, url: str) -> str:
        attempts   = 1 + self.max_retries
        last_error: Optional[Exception] = None

        for attempt in range(attempts):
            if attempt:
                delay = attempt * self.backoff_s
                log.info(f"{key}: retry {attempt}/{self.max_retries} in {delay:.0f}s")
                await self._sleep(delay)
            try:
                log.debug(f"{key}: GET {url}")
                return await get_text(self.client, url, self.timeout_s)
            except RETRYABLE as ex:
                last_error = ex
                log.warning(f"{key}: attempt {attempt + 1} failed: {ex}")

        log.error(f"{key}: max retries exceeded, last cause: {last_error}")
        raise ExhaustedRetries(key, attempts, last_error)
