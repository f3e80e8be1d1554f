"""Build the ordered provider list from configuration."""

from weather_aggregator import config
from weather_aggregator.providers.base import WeatherProvider
from weather_aggregator.providers.darksky import DarkSky
from weather_aggregator.providers.openweathermap import OpenWeatherMap

PROVIDER_TYPES: dict[str, type[WeatherProvider]] = {
    OpenWeatherMap.name: OpenWeatherMap,
    DarkSky.name: DarkSky,
}


def build_providers(names: list[str] | None = None) -> list[WeatherProvider]:
    """Instantiate providers in the configured order.

    Args:
        names: Provider names; defaults to the WEATHER_PROVIDERS setting.

    Returns:
        One provider instance per name, in the given order.

    Raises:
        ValueError: If a name is not a known provider or the list is empty.
    """
    names = config.WEATHER_PROVIDERS if names is None else names
    if not names:
        raise ValueError("At least one weather provider must be configured")
    unknown = [name for name in names if name not in PROVIDER_TYPES]
    if unknown:
        raise ValueError(f"Unknown weather providers: {', '.join(unknown)}")
    return [PROVIDER_TYPES[name]() for name in names]
