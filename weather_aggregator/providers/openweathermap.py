"""OpenWeatherMap provider, queried by city name."""

from weather_aggregator import config
from weather_aggregator.conversions.units import kelvin_to_celsius, kelvin_to_fahrenheit
from weather_aggregator.logging_config import logger
from weather_aggregator.models.reading import Reading
from weather_aggregator.providers.base import WeatherProvider, number_at, request_json


class OpenWeatherMap(WeatherProvider):
    """Current weather from OpenWeatherMap.

    The API only uses the city name. It answers in Kelvin and usually
    includes the coordinates it matched, which we pass on when the caller
    did not know them.
    """

    name = "openweathermap"

    def __init__(
        self,
        api_key: str = config.OPENWEATHERMAP_API_KEY,
        base_url: str = config.OPENWEATHERMAP_URL,
        timeout: float = config.PROVIDER_TIMEOUT_S,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    def fetch_reading(self, city: str, lat: float, long: float) -> Reading:
        data = request_json(
            url=self.base_url,
            params={"APPID": self.api_key, "q": city},
            timeout=self.timeout,
            provider=self.name,
            log_context={"city": city},
        )

        kelvin = number_at(data, "main", "temp", provider=self.name)
        celsius = kelvin_to_celsius(kelvin)
        fahrenheit = kelvin_to_fahrenheit(kelvin)

        if lat != 0.0 or long != 0.0:
            return Reading(celsius=celsius, fahrenheit=fahrenheit, kelvin=kelvin)

        coord = data.get("coord")
        found_lat = coord.get("lat") if isinstance(coord, dict) else None
        found_long = coord.get("lon") if isinstance(coord, dict) else None
        if _is_coordinate(found_lat) and _is_coordinate(found_long):
            logger.info(
                "PROVIDER_COORDINATES_FOUND",
                provider=self.name,
                city=city,
                latitude=round(found_lat, 4),
                longitude=round(found_long, 4),
            )
            return Reading(
                celsius=celsius,
                fahrenheit=fahrenheit,
                kelvin=kelvin,
                latitude=float(found_lat),
                longitude=float(found_long),
            )

        logger.info("PROVIDER_COORDINATES_MISSING", provider=self.name, city=city)
        return Reading(celsius=celsius, fahrenheit=fahrenheit, kelvin=kelvin)


def _is_coordinate(value) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and value != 0.0
    )
