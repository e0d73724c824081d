from django.urls import include, path

urlpatterns = [
    path("", include("fuel_log.urls")),
]
