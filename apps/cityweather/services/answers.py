"""
Weather answer types shared by the service and the source clients.

An answer is either a WeatherReport (status "ok") or a WeatherError
(status "error"). Both serialize to the JSON body returned by the API.
"""

import json
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum

WRONG_DATE = 'wrong date'
WRONG_CITY = 'wrong city'
NO_DATA = 'no data'
SOURCE_UNAVAILABLE = 'source unavailable'


class Regime(Enum):
    """Which source answers a date."""
    ARCHIVE = 'archive'
    RECENT = 'recent'
    FORECAST = 'forecast'


class WeatherServiceError(Exception):
    """Base exception for weather service errors."""
    message = NO_DATA

    def __init__(self, message=None):
        super().__init__(message or self.message)


class NoDataError(WeatherServiceError):
    """Source answered but has nothing for the requested day."""
    message = NO_DATA


class SourceUnavailableError(WeatherServiceError):
    """Source could not be reached or returned an unreadable payload."""
    message = SOURCE_UNAVAILABLE


@dataclass(frozen=True)
class WeatherQuery:
    """A validated request: known city, real calendar date."""
    city_name: str
    raw_date: str
    target_date: date
    city_code: int

    @property
    def year(self) -> int:
        return self.target_date.year

    @property
    def month(self) -> int:
        return self.target_date.month

    @property
    def day(self) -> int:
        return self.target_date.day

    @property
    def end_date(self) -> date:
        return self.target_date + timedelta(days=1)


def _dumps(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(',', ':'))


@dataclass(frozen=True)
class WeatherReport:
    """Normalized daily weather."""
    temp_max: int
    temp_min: int
    pressure: int  # mmHg
    clouds: float  # percent, 0-100

    status = 'ok'
    is_ok = True

    def to_dict(self) -> dict:
        return {
            'status': self.status,
            'temp_max': self.temp_max,
            'temp_min': self.temp_min,
            'pressure': self.pressure,
            'clouds': self.clouds,
        }

    def to_json(self) -> str:
        return _dumps(self.to_dict())


@dataclass(frozen=True)
class WeatherError:
    """User-facing error answer."""
    message: str

    status = 'error'
    is_ok = False

    @classmethod
    def from_exception(cls, exc: WeatherServiceError) -> 'WeatherError':
        return cls(str(exc))

    def to_dict(self) -> dict:
        return {'status': self.status, 'error': self.message}

    def to_json(self) -> str:
        return _dumps(self.to_dict())


# Type alias for both answer variants
WeatherAnswer = WeatherReport | WeatherError
