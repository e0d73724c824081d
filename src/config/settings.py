"""Django settings for fuel log project."""

from __future__ import annotations

import os

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me-in-production")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = [host for host in os.getenv("DJANGO_ALLOWED_HOSTS", "").split(",") if host]

INSTALLED_APPS = [
    "django.contrib.sessions",
    "django.contrib.staticfiles",
    "fuel_log",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"
ASGI_APPLICATION = "config.asgi.application"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "fuel-log-cache",
    }
}

# The last generated log lives in the visitor's session only. LocMemCache is
# per process, so multi-worker deployments need a shared CACHES backend.
SESSION_ENGINE = "django.contrib.sessions.backends.cache"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "fuel_log": {
            "handlers": ["console"],
            "level": os.getenv("FUEL_LOG_LOG_LEVEL", "INFO"),
        },
    },
}

DEFAULT_START_DATE = os.getenv("DEFAULT_START_DATE", "2024-07-01")
DEFAULT_END_DATE = os.getenv("DEFAULT_END_DATE", "2025-06-30")
DEFAULT_TANK_CAPACITY_GALLONS = float(os.getenv("DEFAULT_TANK_CAPACITY_GALLONS", "26"))
DEFAULT_TOTAL_GALLONS = float(os.getenv("DEFAULT_TOTAL_GALLONS", "2450"))
DEFAULT_GAS_STATIONS = [
    station.strip()
    for station in os.getenv(
        "DEFAULT_GAS_STATIONS",
        "\n".join(
            [
                "Circle K, 35 S Grand Blvd, St Louis, Missouri, 63103",
                "BP, 1815 Arsenal, St Louis, Missouri, 63118",
                "Moto, 3120 Mississippi Ave, Sauget, Illinois, 6220",
                "Love's, 6124 N Broadway, St Louis, Missouri, 63147",
                "Circle K, 1514 Hampton Ave, St Louis, Missouri, 63139",
                "Zoom, 1300 N Tucker Blvd, St. Louis, Missouri, 63106",
                "ZX, 1007 S Broadway, St Louis, Missouri, 63103",
                "Shell, 721 N Tucker Blvd, St Louis, Missouri, 63101",
                "QuikTrip, 2600 Chouteau Ave, St Louis, Missouri, 63103",
                "Phillips 66, 1655 S Jefferson Ave, St Louis, Missouri, 63104",
            ]
        ),
    ).splitlines()
    if station.strip()
]
