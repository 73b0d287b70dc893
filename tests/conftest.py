from datetime import datetime

import httpx
import pytest
import pytest_asyncio
import pytz

from app.core.fetcher import Fetcher

IST = pytz.timezone("Asia/Kolkata")


HOROSCOPE_HTML = """
<html><body>
  <div class="ui-sign-heading"><h1>{title}</h1></div>
  <div class="ui-large-hdg">Monday, 22 January 2024</div>
  <div class="ui-large-content text-justify">Today brings new energy to your work.</div>
  <div class="ui-large-content text-justify">Lucky Number :- 9</div>
  <div class="ui-large-content text-justify">Lucky Color :- Red</div>
  <div class="ui-large-content text-justify">Remedy :- Offer water to the Sun.</div>
</body></html>
"""

PANCHANGAM_HTML = """
<html><body>
  <h3 class="panel-title">Monday, January 22, 2024</h3>
  <table>
    <tr><td>City</td><td>Hyderabad</td></tr>
    <tr><td>Sunrise</td><td>06:52 AM</td></tr>
    <tr><td>Sunset</td><td>06:05 PM</td></tr>
    <tr><td>Month</td><td>Pushyam</td></tr>
    <tr><td>Paksham</td><td>Shukla Paksham</td></tr>
    <tr><td>Tithi</td><td>Ekadasi : Jan 21 07:26 PM to Jan 22 07:51 PM<br>Dwadasi : Jan 22 07:51 PM to Jan 23 08:39 PM</td></tr>
    <tr><td>Nakshatram</td><td>Mrigasira : Jan 22 04:58 AM to Jan 23 05:50 AM</td></tr>
    <tr><td>Yogam</td><td>Brahma : Jan 22 08:00 AM to Jan 23 07:20 AM</td></tr>
    <tr><td>Karanam</td><td>Vanija : Jan 22 07:39 AM to Jan 22 07:51 PM<br>see notes</td></tr>
    <tr><td>Rahukalam</td><td>08:15 AM to 09:39 AM</td></tr>
    <tr><td>Yamagandam</td><td>11:04 AM to 12:28 PM</td></tr>
    <tr><td>Varjyam</td><td>02:10 PM to 03:44 PM</td></tr>
    <tr><td>Gulika</td><td>01:53 PM to 03:17 PM</td></tr>
    <tr><td>Amritakalam</td><td>11:33 PM to 01:07 AM</td></tr>
    <tr><td>Abhijit Muhurtham</td><td>12:06 PM to 12:51 PM</td></tr>
  </table>
</body></html>
"""


class FakeClock:
    """Monotonic time moves only when told to; wall clock is fixed."""

    def __init__(self, now: datetime | None = None):
        self.tz = IST
        self._now = now or IST.localize(datetime(2024, 1, 22, 10, 0))
        self.t = 1000.0

    def monotonic(self) -> float:
        return self.t

    def advance(self, seconds: float) -> None:
        self.t += seconds

    def now(self) -> datetime:
        return self._now

    def set_now(self, now: datetime) -> None:
        self._now = now

    def today(self) -> str:
        return self._now.strftime("%Y-%m-%d")


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class Upstream:
    """
    MockTransport handler that serves the test pages and counts requests per
    URL. Paths listed in `failing` answer 503.
    """

    def __init__(self):
        self.calls: dict[str, int] = {}
        self.failing: set[str] = set()

    @property
    def total(self) -> int:
        return sum(self.calls.values())

    def count(self, fragment: str) -> int:
        return sum(n for url, n in self.calls.items() if fragment in url)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls[url] = self.calls.get(url, 0) + 1
        if any(f in url for f in self.failing):
            return httpx.Response(503, text="unavailable")
        if "astrosage" in url:
            sign = url.rsplit("daily-", 1)[1].split("-horoscope")[0]
            return httpx.Response(200, text=HOROSCOPE_HTML.format(title=f"{sign.title()} Daily Horoscope"))
        if "panchangam" in url:
            return httpx.Response(200, text=PANCHANGAM_HTML)
        return httpx.Response(404)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def upstream():
    return Upstream()


@pytest_asyncio.fixture
async def http_client(upstream):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream)) as client:
        yield client


@pytest.fixture
def fetcher(http_client, sleep):
    return Fetcher(client=http_client, sleep=sleep)
