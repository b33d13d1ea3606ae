"""
Weather source clients.

One client per date regime:
- Archive (Gismeteo diary) - scraped HTML, one page per city and month
- Recent (Weatherbit) - daily history for yesterday and today
- Forecast (Visual Crossing) - timeline forecast up to a week ahead

Each client normalizes its provider's payload into a WeatherReport. Upstream
problems never escape fetch(); they come back as a WeatherError.
"""

import logging
import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup
from django.conf import settings

from .answers import (
    NoDataError,
    Regime,
    SourceUnavailableError,
    WeatherAnswer,
    WeatherError,
    WeatherQuery,
    WeatherReport,
    WeatherServiceError,
)

logger = logging.getLogger(__name__)

# Icon file name in the archive table -> cloud cover, percent
CLOUD_ICONS = {
    'sun.png': 0,
    'sunc.png': 25,
    'suncl.png': 50,
    'dull.png': 100,
}

# Provider pressure (hPa/mbar) -> mmHg
PRESSURE_FACTOR = Decimal('0.75')

_INT_RE = re.compile(r'^[+-]?\d+$', re.ASCII)


def round_half_up(value) -> int:
    """Round to the nearest integer, halves away from zero."""
    try:
        return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError):
        raise NoDataError()


def to_mmhg(value) -> int:
    """Convert provider pressure to mmHg, rounded."""
    try:
        return round_half_up(Decimal(str(value)) * PRESSURE_FACTOR)
    except InvalidOperation:
        raise NoDataError()


def to_degrees(value) -> int:
    """Whole degrees, fraction dropped toward zero."""
    try:
        return int(Decimal(str(value)))
    except (InvalidOperation, ValueError, OverflowError):
        raise NoDataError()


def to_percent(value) -> float:
    """Cloud cover as a finite float."""
    try:
        percent = float(value)
    except (TypeError, ValueError):
        raise NoDataError()
    if not math.isfinite(percent):
        raise NoDataError()
    return percent


class WeatherSourceClient:
    """Base class: one upstream provider, one GET per fetch, no retries."""

    regime: Regime
    name = 'source'

    def __init__(
        self,
        http_client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ):
        self.http_client = http_client
        self.timeout = timeout if timeout is not None else getattr(settings, 'WEATHER_REQUEST_TIMEOUT', 10.0)
        self.user_agent = user_agent or getattr(settings, 'WEATHER_USER_AGENT', 'CityWeather/1.0')

    def fetch(self, query: WeatherQuery) -> WeatherAnswer:
        """Fetch and normalize weather for the query's city and date."""
        logger.info(f"Fetching {self.name} weather for {query.city_name} on {query.raw_date}")
        try:
            return self._fetch(query)
        except WeatherServiceError as e:
            logger.warning(f"{self.name} fetch failed for {query.city_name} on {query.raw_date}: {e}")
            return WeatherError.from_exception(e)

    def _fetch(self, query: WeatherQuery) -> WeatherReport:
        raise NotImplementedError

    def _get(self, url: str, params: Optional[dict] = None) -> httpx.Response:
        headers = {'User-Agent': self.user_agent}
        try:
            if self.http_client is not None:
                response = self.http_client.get(
                    url, params=params, headers=headers, timeout=self.timeout, follow_redirects=True,
                )
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                    response = client.get(url, params=params, headers=headers)
        except httpx.TimeoutException:
            logger.warning(f"{self.name} request timed out: {url}")
            raise SourceUnavailableError()
        except httpx.RequestError as e:
            logger.warning(f"{self.name} request failed: {url}: {e}")
            raise SourceUnavailableError()

        if response.status_code != 200:
            logger.warning(f"{self.name} API error: {response.status_code}")
            raise SourceUnavailableError()
        return response

    def _get_json(self, url: str, params: Optional[dict] = None) -> dict:
        response = self._get(url, params=params)
        try:
            data = response.json()
        except ValueError:
            logger.warning(f"{self.name} returned invalid JSON")
            raise SourceUnavailableError()
        if not isinstance(data, dict):
            logger.warning(f"{self.name} returned unexpected JSON: {type(data).__name__}")
            raise SourceUnavailableError()
        return data


class ArchiveClient(WeatherSourceClient):
    """
    Gismeteo weather diary scraper.

    A diary page holds one table row per day of the month. Rows can be
    missing, so the row at index day-1 is only a first guess; the day number
    in the first cell decides.

    Columns used (0-indexed): 0 day, 1 temperature max, 2 pressure,
    3 cloud icon, 6 temperature min.
    """

    regime = Regime.ARCHIVE
    name = 'archive'

    DAY_COL = 0
    TEMP_MAX_COL = 1
    PRESSURE_COL = 2
    CLOUDS_COL = 3
    TEMP_MIN_COL = 6

    def __init__(self, base_url: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        base_url = base_url or getattr(settings, 'WEATHER_ARCHIVE_BASE_URL', 'http://www.gismeteo.ru')
        self.base_url = base_url.rstrip('/')

    def month_url(self, query: WeatherQuery) -> str:
        return f"{self.base_url}/diary/{query.city_code}/{query.year}/{query.month:02d}/"

    def _fetch(self, query: WeatherQuery) -> WeatherReport:
        response = self._get(self.month_url(query))
        return self.parse_month_page(response.text, query.day)

    def parse_month_page(self, html: str, day: int) -> WeatherReport:
        """Extract the report for `day` from a diary month page."""
        soup = BeautifulSoup(html, 'html.parser')
        table_body = soup.find('tbody')
        if table_body is None:
            # Nothing recorded for the whole month
            raise NoDataError()

        cells = self._find_day_cells(table_body.find_all('tr'), day)
        if cells is None:
            raise NoDataError()

        if len(cells) <= self.TEMP_MIN_COL:
            logger.warning(f"Archive row for day {day} has {len(cells)} columns")
            raise NoDataError()

        return WeatherReport(
            temp_max=self._parse_int(cells[self.TEMP_MAX_COL]),
            temp_min=self._parse_int(cells[self.TEMP_MIN_COL]),
            pressure=self._parse_int(cells[self.PRESSURE_COL]),
            clouds=float(self._parse_clouds(cells[self.CLOUDS_COL])),
        )

    def _find_day_cells(self, rows: list, day: int) -> Optional[list]:
        # Fast path: rows are in order and complete
        if 0 < day <= len(rows):
            cells = rows[day - 1].find_all('td')
            if self._row_day(cells) == day:
                return cells

        for row in rows:
            cells = row.find_all('td')
            if self._row_day(cells) == day:
                return cells
        return None

    def _row_day(self, cells: list) -> Optional[int]:
        if len(cells) <= self.DAY_COL:
            return None
        text = cells[self.DAY_COL].get_text(strip=True)
        if text.isascii() and text.isdigit():
            return int(text)
        return None

    @staticmethod
    def _parse_int(cell) -> int:
        text = cell.get_text(strip=True).replace('−', '-')
        if not _INT_RE.match(text):
            logger.warning(f"Unexpected archive cell value: {text!r}")
            raise NoDataError()
        return int(text)

    @staticmethod
    def _parse_clouds(cell) -> int:
        img = cell.find('img')
        src = img.get('src') if img is not None else None
        if not src:
            logger.warning("Archive row has no cloud icon")
            raise NoDataError()

        icon = src.split('?', 1)[0].rsplit('/', 1)[-1]
        if icon not in CLOUD_ICONS:
            logger.warning(f"Unknown archive cloud icon: {icon}")
            raise NoDataError()
        return CLOUD_ICONS[icon]


class RecentClient(WeatherSourceClient):
    """Weatherbit daily history for yesterday and today."""

    regime = Regime.RECENT
    name = 'recent'
    COUNTRY = 'Russia'

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key if api_key is not None else getattr(settings, 'WEATHERBIT_API_KEY', '')
        base_url = base_url or getattr(settings, 'WEATHER_RECENT_BASE_URL', 'https://api.weatherbit.io')
        self.base_url = base_url.rstrip('/')

    def _fetch(self, query: WeatherQuery) -> WeatherReport:
        if not self.api_key:
            logger.warning("WEATHERBIT_API_KEY not configured")
            raise SourceUnavailableError()

        params = {
            'city': query.city_name,
            'country': self.COUNTRY,
            'start_date': f"{query.target_date.isoformat()}:00",
            'end_date': f"{query.end_date.isoformat()}:00",
            'key': self.api_key,
        }
        data = self._get_json(f"{self.base_url}/v2.0/history/daily", params=params)
        return self.parse_response(data)

    def parse_response(self, data: dict) -> WeatherReport:
        days = data.get('data') or []
        if not isinstance(days, list) or not days:
            raise NoDataError()

        try:
            day = days[0]
            return WeatherReport(
                temp_max=to_degrees(day['max_temp']),
                temp_min=to_degrees(day['min_temp']),
                pressure=to_mmhg(day['pres']),
                clouds=to_percent(day['clouds']),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to parse recent response: {e}")
            raise NoDataError()


class ForecastClient(WeatherSourceClient):
    """Visual Crossing timeline forecast, metric units."""

    regime = Regime.FORECAST
    name = 'forecast'

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key if api_key is not None else getattr(settings, 'VISUALCROSSING_API_KEY', '')
        base_url = base_url or getattr(settings, 'WEATHER_FORECAST_BASE_URL', 'https://weather.visualcrossing.com')
        self.base_url = base_url.rstrip('/')

    def timeline_url(self, query: WeatherQuery) -> str:
        city = quote(query.city_name, safe='')
        return (
            f"{self.base_url}/VisualCrossingWebServices/rest/services/timeline/"
            f"{city}/{query.target_date.isoformat()}"
        )

    def _fetch(self, query: WeatherQuery) -> WeatherReport:
        if not self.api_key:
            logger.warning("VISUALCROSSING_API_KEY not configured")
            raise SourceUnavailableError()

        params = {
            'include': 'days',
            'unitGroup': 'metric',
            'key': self.api_key,
        }
        data = self._get_json(self.timeline_url(query), params=params)
        return self.parse_response(data)

    def parse_response(self, data: dict) -> WeatherReport:
        days = data.get('days') or []
        if not isinstance(days, list) or not days:
            raise NoDataError()

        try:
            day = days[0]
            return WeatherReport(
                temp_max=to_degrees(day['tempmax']),
                temp_min=to_degrees(day['tempmin']),
                pressure=to_mmhg(day['pressure']),
                clouds=to_percent(day['cloudcover']),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to parse forecast response: {e}")
            raise NoDataError()
