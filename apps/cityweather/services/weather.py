"""
Weather Service

Answers "what is the weather in city C on date D" from one of three sources,
picked by how far D is from today:
- Archive (Gismeteo diary) - 1997-04-01 up to the day before yesterday
- Recent (Weatherbit) - yesterday and today
- Forecast (Visual Crossing) - tomorrow up to 7 days ahead

Every answer, errors included, is cached as its serialized JSON. Past dates
are cached for 7 days; today, forecasts and errors for 24 hours.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Optional
from urllib.parse import quote
from zoneinfo import ZoneInfo

import httpx
from django.conf import settings
from django.core.cache import cache as default_cache

from ..cities import resolve_city
from .answers import (
    WRONG_CITY,
    WRONG_DATE,
    Regime,
    WeatherAnswer,
    WeatherError,
    WeatherQuery,
)
from .sources import ArchiveClient, ForecastClient, RecentClient, WeatherSourceClient

logger = logging.getLogger(__name__)

# The archive has nothing earlier
FIRST_ARCHIVE_DATE = date(1997, 4, 1)
FORECAST_DAYS = 7

_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}$', re.ASCII)


def parse_query_date(raw_date: str) -> Optional[date]:
    """Parse a YYYY-MM-DD string; None when malformed or not a calendar date."""
    if not raw_date or not _DATE_RE.match(raw_date):
        return None
    try:
        return date.fromisoformat(raw_date)
    except ValueError:
        return None


def last_forecast_day(today: date) -> date:
    return today + timedelta(days=FORECAST_DAYS)


def date_range_message(today: date) -> str:
    return f"date must be between {FIRST_ARCHIVE_DATE.isoformat()} and {last_forecast_day(today).isoformat()}"


def classify_date(target_date: date, today: date) -> Optional[Regime]:
    """
    Pick the regime for a date, or None when no source covers it.

    Each bound is inclusive on its own side, so the day before yesterday is
    still archive and today is still recent.
    """
    day_before_yesterday = today - timedelta(days=2)

    if FIRST_ARCHIVE_DATE <= target_date <= day_before_yesterday:
        return Regime.ARCHIVE
    if day_before_yesterday < target_date <= today:
        return Regime.RECENT
    if today < target_date <= last_forecast_day(today):
        return Regime.FORECAST
    return None


class WeatherService:
    """Validates queries, dispatches to a source and caches the answers."""

    CACHE_KEY_PREFIX = 'weather_'

    def __init__(
        self,
        cache=None,
        http_client: Optional[httpx.Client] = None,
        sources: Optional[dict[Regime, WeatherSourceClient]] = None,
    ):
        self.cache = cache if cache is not None else default_cache
        self.local_timezone = ZoneInfo(getattr(settings, 'WEATHER_LOCAL_TIMEZONE', 'Europe/Moscow'))

        # Cache TTLs
        self.short_cache_ttl = getattr(settings, 'WEATHER_SHORT_CACHE_TTL', 86400)  # 24 hours
        self.long_cache_ttl = getattr(settings, 'WEATHER_LONG_CACHE_TTL', 604800)  # 7 days
        self.city_cache_ttl = getattr(settings, 'WEATHER_CITY_CACHE_TTL', 604800)

        if sources is None:
            sources = {
                Regime.ARCHIVE: ArchiveClient(http_client=http_client),
                Regime.RECENT: RecentClient(http_client=http_client),
                Regime.FORECAST: ForecastClient(http_client=http_client),
            }
        self.sources = sources

    def _cache_key(self, prefix: str, *parts: str) -> str:
        # Parts are percent-encoded so ':' only ever separates them
        identifier = ':'.join(quote(part, safe='') for part in parts)
        return f"{self.CACHE_KEY_PREFIX}{prefix}_{identifier}"

    def answer_cache_key(self, raw_date: str, city_name: str) -> str:
        return self._cache_key('answer', raw_date, city_name)

    def city_cache_key(self, city_name: str) -> str:
        return self._cache_key('city', city_name)

    def today(self) -> date:
        return datetime.now(self.local_timezone).date()

    def get_weather(self, city_name: str, raw_date: str, today: Optional[date] = None) -> str:
        """
        Return the JSON answer for a city and a raw date string.

        A cached answer is returned as stored. On a miss the answer is built,
        cached with a TTL depending on outcome and date, and returned.
        """
        city_name = city_name or ''
        raw_date = raw_date or ''
        cache_key = self.answer_cache_key(raw_date, city_name)

        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Answer cache hit for {city_name} on {raw_date}")
            return cached

        if today is None:
            today = self.today()

        answer = self.build_answer(city_name, raw_date, today)
        ttl = self.choose_ttl(answer, parse_query_date(raw_date), today)
        payload = answer.to_json()
        self.cache.set(cache_key, payload, ttl)
        return payload

    def build_answer(self, city_name: str, raw_date: str, today: date) -> WeatherAnswer:
        """Validate, classify and fetch, without touching the answer cache."""
        target_date = parse_query_date(raw_date)
        if target_date is None:
            return WeatherError(WRONG_DATE)

        city_code = self.get_city_code(city_name)
        if city_code is None:
            return WeatherError(WRONG_CITY)

        regime = classify_date(target_date, today)
        if regime is None:
            return WeatherError(date_range_message(today))

        query = WeatherQuery(
            city_name=city_name,
            raw_date=raw_date,
            target_date=target_date,
            city_code=city_code,
        )
        return self.sources[regime].fetch(query)

    def get_city_code(self, city_name: str) -> Optional[int]:
        """Resolve a city code, going through the cache first."""
        if not city_name:
            return None

        cache_key = self.city_cache_key(city_name)
        city_code = self.cache.get(cache_key)
        if city_code is not None:
            return city_code

        city_code = resolve_city(city_name)
        if city_code is None:
            logger.info(f"Unknown city: {city_name}")
            return None

        self.cache.set(cache_key, city_code, self.city_cache_ttl)
        return city_code

    def choose_ttl(self, answer: WeatherAnswer, target_date: Optional[date], today: date) -> int:
        """Past dates never change; everything else may be revised upstream."""
        if not answer.is_ok or target_date is None:
            return self.short_cache_ttl
        if target_date < today:
            return self.long_cache_ttl
        return self.short_cache_ttl

    def is_configured(self) -> bool:
        """Check that the recent and forecast API keys are set."""
        return bool(
            getattr(settings, 'WEATHERBIT_API_KEY', '')
            and getattr(settings, 'VISUALCROSSING_API_KEY', '')
        )
