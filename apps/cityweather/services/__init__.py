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
from .sources import ArchiveClient, ForecastClient, RecentClient
from .weather import WeatherService, classify_date, parse_query_date

__all__ = [
    'WeatherService',
    'WeatherServiceError',
    'NoDataError',
    'SourceUnavailableError',
    'Regime',
    'WeatherQuery',
    'WeatherReport',
    'WeatherError',
    'WeatherAnswer',
    'ArchiveClient',
    'RecentClient',
    'ForecastClient',
    'classify_date',
    'parse_query_date',
]
