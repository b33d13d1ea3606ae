"""Tests for the weather and health endpoints."""

import json
from unittest.mock import MagicMock, patch

from django.core.cache import cache
from django.test import Client, TestCase, override_settings
from django.urls import reverse

from apps.cityweather.services import WeatherService
from apps.cityweather.tests.fixtures import RecordingHandler, january_page, mock_http_client


class WeatherViewTests(TestCase):
    """End-to-end: query string in, JSON body out, upstream faked."""

    def setUp(self):
        cache.clear()
        self.client = Client()
        self.handler = RecordingHandler(text=january_page())
        http_client = mock_http_client(self.handler)
        patcher = patch(
            'apps.cityweather.views.WeatherService',
            side_effect=lambda: WeatherService(http_client=http_client),
        )
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        cache.clear()

    def get_weather(self, params, url_name='weather'):
        return self.client.get(reverse(url_name), params)

    def test_archive_day(self):
        response = self.get_weather({'city': 'Москва', 'date': '2023-01-10'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            'status': 'ok',
            'temp_max': -3,
            'temp_min': -9,
            'pressure': 745,
            'clouds': 50,
        })
        self.assertEqual(self.handler.requests[0].url.path, '/diary/4368/2023/01/')

    def test_unknown_city(self):
        response = self.get_weather({'city': 'Unknown City', 'date': '2023-01-10'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'status': 'error', 'error': 'wrong city'})
        self.assertEqual(self.handler.requests, [])

    def test_invalid_calendar_date(self):
        response = self.get_weather({'city': 'Москва', 'date': '2023-02-30'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'status': 'error', 'error': 'wrong date'})

    def test_missing_parameters(self):
        response = self.get_weather({})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'status': 'error', 'error': 'wrong date'})

    def test_out_of_range_date(self):
        response = self.get_weather({'city': 'Москва', 'date': '1990-01-01'})

        body = response.json()
        self.assertEqual(body['status'], 'error')
        self.assertTrue(body['error'].startswith('date must be between 1997-04-01 and '))

    def test_content_type(self):
        response = self.get_weather({'city': 'Москва', 'date': '2023-01-10'})

        self.assertEqual(response['Content-Type'], 'application/json; charset=UTF-8')

    def test_root_route_is_alias(self):
        response = self.get_weather({'city': 'Москва', 'date': '2023-01-10'}, url_name='weather_index')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'ok')

    def test_repeated_query_served_from_cache(self):
        first = self.get_weather({'city': 'Москва', 'date': '2023-01-10'})
        second = self.get_weather({'city': 'Москва', 'date': '2023-01-10'})

        self.assertEqual(first.content, second.content)
        self.assertEqual(len(self.handler.requests), 1)

    def test_post_not_allowed(self):
        response = self.client.post(reverse('weather'), {'city': 'Москва', 'date': '2023-01-10'})

        self.assertEqual(response.status_code, 405)


@override_settings(WEATHERBIT_API_KEY='wb-key', WEATHER_SHORT_CACHE_TTL=86400)
class MalformedUpstreamViewTests(TestCase):
    """Unusable provider payloads still answer 200 with a cached error."""

    def setUp(self):
        self.client = Client()
        self.cache = MagicMock()
        self.cache.get.return_value = None
        self.today = WeatherService(sources={}).today().isoformat()

    def get_weather_with_upstream(self, handler):
        http_client = mock_http_client(handler)
        with patch(
            'apps.cityweather.views.WeatherService',
            side_effect=lambda: WeatherService(cache=self.cache, http_client=http_client),
        ):
            return self.client.get(reverse('weather'), {'city': 'Москва', 'date': self.today})

    def assert_error_cached_short(self, response, message):
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'status': 'error', 'error': message})

        key = WeatherService(sources={}).answer_cache_key(self.today, 'Москва')
        answer_calls = [c for c in self.cache.set.call_args_list if c[0][0] == key]
        self.assertEqual(len(answer_calls), 1)
        self.assertEqual(answer_calls[0][0][1], response.content.decode('utf-8'))
        self.assertEqual(answer_calls[0][0][2], 86400)

    def test_non_numeric_field(self):
        handler = RecordingHandler(json={'data': [
            {'max_temp': 1, 'min_temp': 0, 'pres': 1000, 'clouds': 'n/a'},
        ]})

        response = self.get_weather_with_upstream(handler)

        self.assert_error_cached_short(response, 'no data')

    def test_html_instead_of_json(self):
        response = self.get_weather_with_upstream(RecordingHandler(text='<html>maintenance</html>'))

        self.assert_error_cached_short(response, 'source unavailable')


class HealthViewTests(TestCase):

    def test_health(self):
        response = Client().get(reverse('health'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(response.content), {'status': 'ok'})
