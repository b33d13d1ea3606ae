from django.urls import path
from . import views

urlpatterns = [
    path('', views.weather, name='weather_index'),
    path('weather/', views.weather, name='weather'),
    path('health/', views.health, name='health'),
]
