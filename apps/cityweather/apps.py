import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class CityweatherConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.cityweather'

    def ready(self):
        from .services import WeatherService
        if not WeatherService().is_configured():
            logger.warning(
                "WEATHERBIT_API_KEY or VISUALCROSSING_API_KEY not configured; "
                "recent and forecast dates will return errors"
            )
