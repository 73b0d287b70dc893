"""
app/core/keys.py
Cache key families. One entry per (family, date[, sign]).

  horoscope:<date>:<sign>   one sign's daily horoscope
  horoscopes:<date>         all twelve signs, fetched as one batch
  panchangam:<date>         daily almanac for a calendar date
"""

from typing import NamedTuple, Optional

SIGN       = "horoscope"
HOROSCOPES = "horoscopes"
ALMANAC    = "panchangam"


class ParsedKey(NamedTuple):
    family: str
    date:   str
    sign:   Optional[str] = None


def sign_key(date: str, sign: str) -> str:
    return f"{SIGN}:{date}:{sign}"


def horoscopes_key(date: str) -> str:
    return f"{HOROSCOPES}:{date}"


def almanac_key(date: str) -> str:
    return f"{ALMANAC}:{date}"


def parse_key(key: str) -> ParsedKey:
    parts = key.split(":")
    if parts[0] == SIGN and len(parts) == 3:
        return ParsedKey(SIGN, parts[1], parts[2])
    if parts[0] in (HOROSCOPES, ALMANAC) and len(parts) == 2:
        return ParsedKey(parts[0], parts[1])
    raise ValueError(f"Unknown cache key: {key!r}")
