"""Dark Sky provider, queried by coordinates."""

from weather_aggregator import config
from weather_aggregator.conversions.units import (
    celsius_to_fahrenheit,
    celsius_to_kelvin,
    fahrenheit_to_celsius,
)
from weather_aggregator.exceptions import DecodeError, UnitError
from weather_aggregator.logging_config import logger
from weather_aggregator.models.reading import Reading
from weather_aggregator.providers.base import WeatherProvider, number_at, request_json

EXCLUDED_BLOCKS = "minutely,hourly,daily,alerts"


class DarkSky(WeatherProvider):
    """Current conditions from the Dark Sky forecast API.

    Dark Sky needs a latitude and longitude; without them no request is made
    and an unknown (all-zero) reading is returned.
    """

    name = "darksky"

    def __init__(
        self,
        api_key: str = config.DARKSKY_API_KEY,
        base_url: str = config.DARKSKY_URL,
        timeout: float = config.PROVIDER_TIMEOUT_S,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def fetch_reading(self, city: str, lat: float, long: float) -> Reading:
        if lat == 0.0 and long == 0.0:
            logger.info("PROVIDER_SKIPPED_NO_COORDINATES", provider=self.name, city=city)
            return Reading.unknown()

        data = request_json(
            url=f"{self.base_url}/{self.api_key}/{lat:.4f},{long:.4f}",
            params={"exclude": EXCLUDED_BLOCKS},
            timeout=self.timeout,
            provider=self.name,
            log_context={"city": city},
        )

        temperature = number_at(data, "currently", "temperature", provider=self.name)
        flags = data.get("flags")
        if flags is not None and not isinstance(flags, dict):
            raise DecodeError(self.name, "field flags is not an object")
        units = (flags or {}).get("units")

        # Dark Sky mostly answers in "us" units whatever we ask for.
        if units == "us":
            fahrenheit = temperature
            celsius = fahrenheit_to_celsius(fahrenheit)
        elif units == "si":
            celsius = temperature
            fahrenheit = celsius_to_fahrenheit(celsius)
        else:
            logger.error("PROVIDER_UNEXPECTED_UNITS", provider=self.name, units=units)
            raise UnitError(self.name, f"unexpected unit type {units!r}")
        kelvin = celsius_to_kelvin(celsius)

        return Reading(
            celsius=celsius,
            fahrenheit=fahrenheit,
            kelvin=kelvin,
            latitude=lat,
            longitude=long,
        )
