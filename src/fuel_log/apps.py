from django.apps import AppConfig


class FuelLogConfig(AppConfig):
    name = "fuel_log"
    verbose_name = "Fuel log generator"
