"""Django settings for the EV charger corridor route planner."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = BASE_DIR.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "change-me-in-production")
DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = [host for host in os.getenv("DJANGO_ALLOWED_HOSTS", "").split(",") if host]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "route_planner",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
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
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"
ASGI_APPLICATION = "config.asgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": PROJECT_ROOT / "db.sqlite3",
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "ev-route-planner-cache",
    }
}

OPENROUTESERVICE_API_KEY = os.getenv("OPENROUTESERVICE_API_KEY", "")
ORS_BASE_URL = os.getenv("ORS_BASE_URL", "https://api.openrouteservice.org")
ORS_TIMEOUT_SECONDS = float(os.getenv("ORS_TIMEOUT_SECONDS", "20"))
ORS_RETRY_COUNT = int(os.getenv("ORS_RETRY_COUNT", "2"))
ORS_ALTERNATIVE_ROUTE_COUNT = int(os.getenv("ORS_ALTERNATIVE_ROUTE_COUNT", "3"))
ORS_ALTERNATIVE_SHARE_FACTOR = float(os.getenv("ORS_ALTERNATIVE_SHARE_FACTOR", "0.6"))
ORS_ALTERNATIVE_WEIGHT_FACTOR = float(os.getenv("ORS_ALTERNATIVE_WEIGHT_FACTOR", "1.4"))

GEOCODING_BASE_URL = os.getenv("GEOCODING_BASE_URL", "https://api.openrouteservice.org")
GEOCODING_TIMEOUT_SECONDS = float(os.getenv("GEOCODING_TIMEOUT_SECONDS", "12"))
GEOCODING_RETRY_COUNT = int(os.getenv("GEOCODING_RETRY_COUNT", "2"))

ROUTE_CACHE_TTL_SECONDS = int(os.getenv("ROUTE_CACHE_TTL_SECONDS", "600"))
GEOCODE_CACHE_TTL_SECONDS = int(os.getenv("GEOCODE_CACHE_TTL_SECONDS", "86400"))

STATION_GEODESIC_QUERY = os.getenv("STATION_GEODESIC_QUERY", "1") == "1"

DEFAULT_CORRIDOR_MILES = float(os.getenv("DEFAULT_CORRIDOR_MILES", "15"))
DEFAULT_RANGE_MILES = float(os.getenv("DEFAULT_RANGE_MILES", "210"))
DEFAULT_MAX_DETOUR_FACTOR = float(os.getenv("DEFAULT_MAX_DETOUR_FACTOR", "1.25"))

RANGE_RESERVE_MILES = float(os.getenv("RANGE_RESERVE_MILES", "30"))
OPTIMIZER_MAX_ITERATIONS = int(os.getenv("OPTIMIZER_MAX_ITERATIONS", "2"))
OPTIMIZER_CANDIDATE_LIMIT = int(os.getenv("OPTIMIZER_CANDIDATE_LIMIT", "8"))
OPTIMIZER_TARGET_GAP_COUNT = int(os.getenv("OPTIMIZER_TARGET_GAP_COUNT", "2"))
WAYPOINT_SEARCH_MIN_RADIUS_MILES = float(os.getenv("WAYPOINT_SEARCH_MIN_RADIUS_MILES", "30"))
WAYPOINT_SEARCH_MAX_RADIUS_MILES = float(os.getenv("WAYPOINT_SEARCH_MAX_RADIUS_MILES", "80"))
WAYPOINT_DISTANCE_WEIGHT = float(os.getenv("WAYPOINT_DISTANCE_WEIGHT", "10"))
WAYPOINT_POWER_DIVISOR_KW = float(os.getenv("WAYPOINT_POWER_DIVISOR_KW", "100"))
WAYPOINT_CHARGER_BONUS_CAP = int(os.getenv("WAYPOINT_CHARGER_BONUS_CAP", "10"))

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "route_planner": {
            "handlers": ["console"],
            "level": os.getenv("ROUTE_PLANNER_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
