from django.urls import path

from fuel_log import views

urlpatterns = [
    path("", views.fuel_log_view, name="fuel-log"),
    path("api/v1/health", views.health_view, name="health"),
    path("api/v1/fuel-log", views.fuel_log_api_view, name="fuel-log-api"),
]
