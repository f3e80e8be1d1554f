"""Environment-driven settings for providers and aggregation."""

import os


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


OPENWEATHERMAP_API_KEY = os.getenv("OPENWEATHERMAP_API_KEY", "")
OPENWEATHERMAP_URL = os.getenv(
    "OPENWEATHERMAP_URL", "http://api.openweathermap.org/data/2.5/weather"
)
DARKSKY_API_KEY = os.getenv("DARKSKY_API_KEY", "")
DARKSKY_URL = os.getenv("DARKSKY_URL", "https://api.darksky.net/forecast")

PROVIDER_TIMEOUT_S = float(os.getenv("PROVIDER_TIMEOUT_S", "5"))
WEATHER_PROVIDERS = [
    name.strip().lower()
    for name in os.getenv("WEATHER_PROVIDERS", "openweathermap,darksky").split(",")
    if name.strip()
]
AGGREGATE_CONCURRENTLY = _env_bool("AGGREGATE_CONCURRENTLY")
TOLERATE_PROVIDER_FAILURES = _env_bool("TOLERATE_PROVIDER_FAILURES")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").lower()
