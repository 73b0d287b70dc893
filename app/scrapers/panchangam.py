"""
app/scrapers/panchangam.py
═══════════════════════════════════════════════════════════════════════════════
Extracts a day's panchangam from telugu.panchangam.org/dailypanchangam.php.

The page is a label/value table: a <td> holding a label ("Sunrise",
"Tithi", ...) followed by a sibling <td> holding the value. Tithi,
Nakshatram, Yogam and Karanam cells hold one time range per <br>-separated
line, e.g.

    Saptami : Jan 21 07:12 AM to Jan 22 08:45 AM

Lines that don't look like that are dropped with a warning.
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag

from app.core.errors import ParseError

log = logging.getLogger("panchangam")

GENERAL_LABELS = {
    "city":    "City",
    "sunrise": "Sunrise",
    "sunset":  "Sunset",
    "month":   "Month",
    "paksham": "Paksham",
}
DETAIL_LABELS = {
    "tithi":      "Tithi",
    "nakshatram": "Nakshatram",
    "yogam":      "Yogam",
    "karanam":    "Karanam",
}
AVOID_LABELS = {
    "rahukalam":  "Rahukalam",
    "yamagandam": "Yamagandam",
    "varjyam":    "Varjyam",
    "gulika":     "Gulika",
}
GOOD_LABELS = {
    "amritakalam":       "Amritakalam",
    "abhijit_muhurtham": "Abhijit Muhurtham",
}

_TIME_RANGE_RE = re.compile(
    r"([^:]+)\s*:\s*"
    r"([A-Za-z]+\s+\d+\s+\d+:\d+\s*[AP]M\s+to\s+[A-Za-z]+\s+\d+\s+\d+:\d+\s*[AP]M)"
)


def empty_panchangam() -> dict:
    return {
        "date":          "",
        "general_info":  {k: "" for k in GENERAL_LABELS},
        "details":       {k: [] for k in DETAIL_LABELS},
        "time_to_avoid": {k: "" for k in AVOID_LABELS},
        "good_time":     {k: "" for k in GOOD_LABELS},
    }


def _value_cell(cells: list[Tag], label: str) -> Optional[Tag]:
    # layout cells wrapping the whole table also "contain" every label
    for td in cells:
        if td.find("td") is not None:
            continue
        if label in td.get_text():
            value = td.find_next_sibling("td")
            if value is not None:
                return value
    return None


def _value(cells: list[Tag], label: str) -> str:
    cell = _value_cell(cells, label)
    return cell.get_text(strip=True) if cell else ""


def _lines(cell: Tag) -> list[str]:
    """Cell text split on <br>, blank lines removed."""
    lines, current = [], []
    for child in cell.children:
        if isinstance(child, Tag) and child.name == "br":
            lines.append("".join(current))
            current = []
        elif isinstance(child, NavigableString):
            current.append(str(child))
        else:
            current.append(child.get_text())
    lines.append("".join(current))
    return [" ".join(line.split()) for line in lines if line.strip()]


def parse_time_ranges(lines: list[str]) -> list[dict]:
    out = []
    for line in lines:
        m = _TIME_RANGE_RE.search(line)
        if not m:
            log.warning(f"No time range in line: {line!r}")
            continue
        out.append({"name": m.group(1).strip(), "time": m.group(2).strip()})
    return out


def extract_panchangam(markup: str) -> dict:
    soup  = BeautifulSoup(markup, "html.parser")
    cells = soup.find_all("td")
    title = soup.select_one("h3.panel-title")
    if not cells and title is None:
        raise ParseError("No panchangam table in page")

    record = empty_panchangam()
    record["date"] = title.get_text(strip=True) if title else ""

    for key, label in GENERAL_LABELS.items():
        record["general_info"][key] = _value(cells, label)

    for key, label in DETAIL_LABELS.items():
        cell = _value_cell(cells, label)
        record["details"][key] = parse_time_ranges(_lines(cell)) if cell else []

    for key, label in AVOID_LABELS.items():
        record["time_to_avoid"][key] = _value(cells, label)

    for key, label in GOOD_LABELS.items():
        record["good_time"][key] = _value(cells, label)

    return record
