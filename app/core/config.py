"""
app/core/config.py  ── Daily Horoscope & Panchangam API
═══════════════════════════════════════════════════════════════════════════════
SOURCE ASSIGNMENT:

  astrosage.com              →  daily horoscope, one page per zodiac sign
  telugu.panchangam.org      →  daily panchangam, one page per calendar date

Both sources are server-rendered HTML. Every value here can be overridden
with an environment variable of the same name.
═══════════════════════════════════════════════════════════════════════════════
"""

import os

import pytz

# ── Calendar ──────────────────────────────────────────────────────────────────
# "Today" and the daily refresh time are both evaluated in this zone.
TIMEZONE = pytz.timezone(os.environ.get("TIMEZONE", "Asia/Kolkata"))

# ── Sources ───────────────────────────────────────────────────────────────────
ASTROSAGE_URL  = os.environ.get(
    "ASTROSAGE_URL", "https://www.astrosage.com/horoscope/daily-{sign}-horoscope.asp"
)
PANCHANGAM_URL = os.environ.get(
    "PANCHANGAM_URL", "https://telugu.panchangam.org/dailypanchangam.php?date={date}"
)

SCRAPE_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/124.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

SIGNS: tuple[str, ...] = (
    "aries", "taurus", "gemini", "cancer",
    "leo", "virgo", "libra", "scorpio",
    "sagittarius", "capricorn", "aquarius", "pisces",
)

# ── Fetching ──────────────────────────────────────────────────────────────────
FETCH_TIMEOUT_S = float(os.environ.get("FETCH_TIMEOUT_S", "10"))
MAX_RETRIES     = int(os.environ.get("MAX_RETRIES", "3"))
RETRY_BACKOFF_S = float(os.environ.get("RETRY_BACKOFF_S", "1"))   # × retry index

# ── Cache ─────────────────────────────────────────────────────────────────────
CACHE_TTL_S       = float(os.environ.get("CACHE_TTL_S", str(24 * 60 * 60)))
CACHE_RETENTION_S = float(os.environ.get("CACHE_RETENTION_S", str(3 * 24 * 60 * 60)))

# ── Scheduler ─────────────────────────────────────────────────────────────────
DAILY_REFRESH_AT = os.environ.get("DAILY_REFRESH_AT", "00:05")   # HH:MM in TIMEZONE


def parse_refresh_at(value: str) -> tuple[int, int]:
    """'00:05' → (0, 5). Raises ValueError on anything else."""
    hour_s, _, minute_s = value.strip().partition(":")
    hour, minute = int(hour_s), int(minute_s)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"DAILY_REFRESH_AT out of range: {value!r}")
    return hour, minute


def refresh_deadline_s(
    max_retries: int = MAX_RETRIES,
    timeout_s: float = FETCH_TIMEOUT_S,
    backoff_s: float = RETRY_BACKOFF_S,
) -> float:
    """Longest one refresh can hold LOADING: every attempt timing out plus all backoff."""
    backoff = sum(i * backoff_s for i in range(1, max_retries + 1))
    return (1 + max_retries) * timeout_s + backoff
