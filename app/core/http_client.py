"""
app/core/http_client.py
Shared async httpx client for the HTML sources.
  • plain_client() → lazily created, browser-like headers, connection limits
  • get_text()     → one GET bounded end to end by asyncio.wait_for, failures mapped to
                     NetworkError / FetchTimeoutError
"""

import asyncio

import httpx

from app.core.config import FETCH_TIMEOUT_S, SCRAPE_HEADERS
from app.core.errors import FetchTimeoutError, NetworkError

_plain_client: httpx.AsyncClient | None = None

_LIMITS = httpx.Limits(max_connections=10, max_keepalive_connections=5)


def plain_client() -> httpx.AsyncClient:
    global _plain_client
    if _plain_client is None or _plain_client.is_closed:
        _plain_client = httpx.AsyncClient(
            headers=SCRAPE_HEADERS,
            timeout=httpx.Timeout(FETCH_TIMEOUT_S),
            follow_redirects=True,
            limits=_LIMITS,
        )
    return _plain_client


async def get_text(
    client: httpx.AsyncClient,
    url: str,
    timeout_s: float = FETCH_TIMEOUT_S,
) -> str:
    """
    Body of a 2xx response. Anything else raises a retryable error.
    timeout_s bounds the whole attempt, body included, not just each phase.
    """
    try:
        resp = await asyncio.wait_for(client.get(url, timeout=timeout_s), timeout_s)
    except (httpx.TimeoutException, asyncio.TimeoutError) as ex:
        raise FetchTimeoutError(f"Timed out after {timeout_s}s: {url}") from ex
    except httpx.HTTPError as ex:
        raise NetworkError(f"{type(ex).__name__} for {url}: {ex}") from ex

    if not resp.is_success:
        raise NetworkError(f"HTTP {resp.status_code} for {url}", resp.status_code)
    return resp.text


async def close_all() -> None:
    global _plain_client
    if _plain_client and not _plain_client.is_closed:
        await _plain_client.aclose()
    _plain_client = None
