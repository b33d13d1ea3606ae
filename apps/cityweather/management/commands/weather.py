"""
Management command to query the weather service from the shell.

Usage:
    python manage.py weather Москва 2023-01-10               # Same answer as the API
    python manage.py weather Москва 2023-01-10 --no-cache    # Skip the answer cache
    python manage.py weather --list-cities                   # Known city names
"""

from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = 'Print the weather answer for a city and date'

    def add_arguments(self, parser):
        parser.add_argument('city', nargs='?', help='City name, exactly as in the city table')
        parser.add_argument('date', nargs='?', help='Date as YYYY-MM-DD')
        parser.add_argument(
            '--no-cache',
            action='store_true',
            help='Build the answer without reading or writing the answer cache',
        )
        parser.add_argument(
            '--list-cities',
            action='store_true',
            help='List known city names and exit',
        )

    def handle(self, *args, **options):
        from apps.cityweather.cities import CITIES
        from apps.cityweather.services import WeatherService

        if options['list_cities']:
            for name in sorted(CITIES):
                self.stdout.write(name)
            return

        city = options['city']
        target_date = options['date']
        if city is None or target_date is None:
            raise CommandError('city and date are required (or use --list-cities)')

        service = WeatherService()
        if options['no_cache']:
            answer = service.build_answer(city, target_date, service.today())
            body = answer.to_json()
        else:
            body = service.get_weather(city, target_date)

        self.stdout.write(body)
