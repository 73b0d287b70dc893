"""
app/scrapers/astrosage.py
═══════════════════════════════════════════════════════════════════════════════
Extracts one sign's daily horoscope from an astrosage.com daily page
(server-rendered HTML, one page per sign, always "today").

  title         ← .ui-sign-heading h1
  date          ← .ui-large-hdg
  text          ← first .ui-large-content.text-justify block
  lucky_number  ← block containing "Lucky Number :- "
  lucky_color   ← block containing "Lucky Color :- "
  remedy        ← block containing "Remedy :- "

Missing optional fields become "". A page without any content block is not a
horoscope page at all → ParseError.
═══════════════════════════════════════════════════════════════════════════════
"""

from bs4 import BeautifulSoup

from app.core.errors import ParseError

CONTENT_SELECTOR = ".ui-large-content.text-justify"

LUCKY_NUMBER_PREFIX = "Lucky Number :- "
LUCKY_COLOR_PREFIX  = "Lucky Color :- "
REMEDY_PREFIX       = "Remedy :- "


def empty_horoscope() -> dict:
    return {
        "title":        "",
        "date":         "",
        "text":         "",
        "lucky_number": "",
        "lucky_color":  "",
        "remedy":       "",
    }


def _text(soup: BeautifulSoup, selector: str) -> str:
    el = soup.select_one(selector)
    return el.get_text(strip=True) if el else ""


def _prefixed(blocks: list, prefix: str) -> str:
    for block in blocks:
        text = block.get_text(" ", strip=True)
        if prefix.strip() in text:
            return text.replace(prefix.strip(), "", 1).strip()
    return ""


def extract_horoscope(markup: str) -> dict:
    soup   = BeautifulSoup(markup, "html.parser")
    blocks = soup.select(CONTENT_SELECTOR)
    if not blocks:
        raise ParseError(f"No '{CONTENT_SELECTOR}' block in horoscope page")

    record = empty_horoscope()
    record["title"]        = _text(soup, ".ui-sign-heading h1")
    record["date"]         = _text(soup, ".ui-large-hdg")
    record["text"]         = blocks[0].get_text(" ", strip=True)
    record["lucky_number"] = _prefixed(blocks, LUCKY_NUMBER_PREFIX)
    record["lucky_color"]  = _prefixed(blocks, LUCKY_COLOR_PREFIX)
    record["remedy"]       = _prefixed(blocks, REMEDY_PREFIX)
    return record
