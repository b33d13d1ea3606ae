"""
Django settings for the cityweather project.

Secrets and deployment-specific values come from the environment; a .env file
in the project root (same directory as manage.py) is loaded first.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env', override=True)


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-cityweather-dev-key')
DEBUG = env_bool('DJANGO_DEBUG', False)
ALLOWED_HOSTS = [h.strip() for h in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h.strip()]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'apps.cityweather',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'core.urls'
WSGI_APPLICATION = 'core.wsgi.application'

# No models; the test runner still expects a database to be configured.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

CACHES = {
    'default': {
        'BACKEND': os.environ.get('DJANGO_CACHE_BACKEND', 'django.core.cache.backends.locmem.LocMemCache'),
        'LOCATION': os.environ.get('DJANGO_CACHE_LOCATION', 'cityweather'),
    }
}

LANGUAGE_CODE = 'ru-ru'
TIME_ZONE = 'Europe/Moscow'
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'apps.cityweather': {
            'handlers': ['console'],
            'level': os.environ.get('DJANGO_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}

# Weather sources
WEATHERBIT_API_KEY = os.environ.get('WEATHERBIT_API_KEY', '')
VISUALCROSSING_API_KEY = os.environ.get('VISUALCROSSING_API_KEY', '')
WEATHER_ARCHIVE_BASE_URL = os.environ.get('WEATHER_ARCHIVE_BASE_URL', 'http://www.gismeteo.ru')
WEATHER_RECENT_BASE_URL = os.environ.get('WEATHER_RECENT_BASE_URL', 'https://api.weatherbit.io')
WEATHER_FORECAST_BASE_URL = os.environ.get('WEATHER_FORECAST_BASE_URL', 'https://weather.visualcrossing.com')
WEATHER_USER_AGENT = os.environ.get('WEATHER_USER_AGENT', 'CityWeather/1.0')
WEATHER_REQUEST_TIMEOUT = float(os.environ.get('WEATHER_REQUEST_TIMEOUT', '10'))
WEATHER_LOCAL_TIMEZONE = os.environ.get('WEATHER_LOCAL_TIMEZONE', 'Europe/Moscow')

# Cache TTLs (seconds)
WEATHER_SHORT_CACHE_TTL = int(os.environ.get('WEATHER_SHORT_CACHE_TTL', '86400'))   # 24 hours
WEATHER_LONG_CACHE_TTL = int(os.environ.get('WEATHER_LONG_CACHE_TTL', '604800'))    # 7 days
WEATHER_CITY_CACHE_TTL = int(os.environ.get('WEATHER_CITY_CACHE_TTL', '604800'))    # 7 days
