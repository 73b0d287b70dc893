"""
app/scrapers/extract.py
Extractor entry point: raw markup + family → structured record.
"""

from app.core.keys import ALMANAC, SIGN
from app.scrapers.astrosage import empty_horoscope, extract_horoscope
from app.scrapers.panchangam import empty_panchangam, extract_panchangam

_EXTRACTORS = {
    SIGN:    (extract_horoscope, empty_horoscope),
    ALMANAC: (extract_panchangam, empty_panchangam),
}


def extract(markup: str, family: str) -> dict:
    """Raises ParseError when the page lacks the anchors the family needs."""
    try:
        parse, _ = _EXTRACTORS[family]
    except KeyError:
        raise ValueError(f"No extractor for family {family!r}") from None
    return parse(markup)


def empty_record(family: str) -> dict:
    return _EXTRACTORS[family][1]()
