import pytest

from app.core.errors import ParseError
from app.core.keys import ALMANAC, SIGN
from app.scrapers.astrosage import extract_horoscope
from app.scrapers.extract import empty_record, extract
from app.scrapers.panchangam import extract_panchangam, parse_time_ranges
from conftest import HOROSCOPE_HTML, PANCHANGAM_HTML


def test_horoscope_fields():
    record = extract_horoscope(HOROSCOPE_HTML.format(title="Aries Daily Horoscope"))
    assert record == {
        "title":        "Aries Daily Horoscope",
        "date":         "Monday, 22 January 2024",
        "text":         "Today brings new energy to your work.",
        "lucky_number": "9",
        "lucky_color":  "Red",
        "remedy":       "Offer water to the Sun.",
    }


def test_horoscope_optional_fields_default_to_empty():
    html = '<div class="ui-large-content text-justify">Only the reading.</div>'
    record = extract_horoscope(html)
    assert record["text"] == "Only the reading."
    assert record["title"] == ""
    assert record["lucky_color"] == ""


def test_horoscope_without_content_block_is_a_parse_error():
    with pytest.raises(ParseError):
        extract_horoscope("<html><body><p>Service unavailable</p></body></html>")


def test_panchangam_fields():
    record = extract_panchangam(PANCHANGAM_HTML)
    assert record["date"] == "Monday, January 22, 2024"
    assert record["general_info"] == {
        "city": "Hyderabad",
        "sunrise": "06:52 AM",
        "sunset": "06:05 PM",
        "month": "Pushyam",
        "paksham": "Shukla Paksham",
    }
    assert record["details"]["tithi"] == [
        {"name": "Ekadasi", "time": "Jan 21 07:26 PM to Jan 22 07:51 PM"},
        {"name": "Dwadasi", "time": "Jan 22 07:51 PM to Jan 23 08:39 PM"},
    ]
    assert len(record["details"]["karanam"]) == 1
    assert record["time_to_avoid"]["rahukalam"] == "08:15 AM to 09:39 AM"
    assert record["good_time"]["abhijit_muhurtham"] == "12:06 PM to 12:51 PM"


def test_panchangam_inside_layout_table():
    inner = PANCHANGAM_HTML.split("<table>", 1)[1].split("</table>", 1)[0]
    html = (
        '<html><body><h3 class="panel-title">Monday, January 22, 2024</h3>'
        "<table><tr><td>Menu</td><td><table>" + inner + "</table></td><td>Ads</td></tr></table>"
        "</body></html>"
    )
    record = extract_panchangam(html)
    assert record["general_info"]["city"] == "Hyderabad"
    assert record["general_info"]["sunset"] == "06:05 PM"
    assert [t["name"] for t in record["details"]["tithi"]] == ["Ekadasi", "Dwadasi"]
    assert record["good_time"]["amritakalam"] == "11:33 PM to 01:07 AM"


def test_time_range_lines_without_a_range_are_dropped():
    assert parse_time_ranges(["Vanija : Jan 22 07:39 AM to Jan 22 07:51 PM", "n/a"]) == [
        {"name": "Vanija", "time": "Jan 22 07:39 AM to Jan 22 07:51 PM"},
    ]


def test_panchangam_without_table_is_a_parse_error():
    with pytest.raises(ParseError):
        extract_panchangam("<html><body>maintenance</body></html>")


def test_dispatch_by_family():
    assert extract(PANCHANGAM_HTML, ALMANAC)["general_info"]["city"] == "Hyderabad"
    assert empty_record(SIGN)["remedy"] == ""
    assert empty_record(ALMANAC)["details"]["yogam"] == []
    with pytest.raises(ValueError):
        extract("<html/>", "weather")
