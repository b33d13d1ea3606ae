from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_GET

from .services import WeatherService

JSON_CONTENT_TYPE = 'application/json; charset=UTF-8'


@require_GET
def health(request):
    """Health check endpoint for the hosting platform."""
    return JsonResponse({'status': 'ok'})


@require_GET
def weather(request):
    """
    Weather for ?city=<name>&date=<YYYY-MM-DD>.

    Always 200; errors are reported in the JSON body.
    """
    city = request.GET.get('city', '')
    target_date = request.GET.get('date', '')

    body = WeatherService().get_weather(city, target_date)
    return HttpResponse(body, content_type=JSON_CONTENT_TYPE)
