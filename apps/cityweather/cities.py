"""
City registry.

Maps a city name (exact, case-sensitive) to the numeric city code used by the
archive source. The table is read once at import from data/cities.csv.
"""

import csv
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

from django.core.exceptions import ImproperlyConfigured

CITIES_CSV = Path(__file__).resolve().parent / 'data' / 'cities.csv'


def load_cities(csv_path: Path = CITIES_CSV) -> Mapping[str, int]:
    """Load the name -> code table from a CSV file with `name,code` columns."""
    try:
        with open(csv_path, 'r', newline='', encoding='utf-8') as f:
            reader = csv.DictReader(f)
            cities = {}
            for row in reader:
                cities[row['name'].strip()] = int(row['code'])
    except FileNotFoundError:
        raise ImproperlyConfigured(f'City table not found: {csv_path}')
    except KeyError as e:
        raise ImproperlyConfigured(f'Missing required column in city table: {e}')
    except ValueError as e:
        raise ImproperlyConfigured(f'Invalid city code in city table: {e}')

    return MappingProxyType(cities)


CITIES = load_cities()


def resolve_city(city_name: str) -> Optional[int]:
    """Return the archive city code, or None for an empty or unknown name."""
    if not city_name:
        return None
    return CITIES.get(city_name)
