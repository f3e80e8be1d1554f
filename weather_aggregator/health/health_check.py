"""Health checks for the configured weather providers."""

import asyncio
from typing import Sequence

from weather_aggregator.exceptions import WeatherServiceError
from weather_aggregator.logging_config import logger
from weather_aggregator.models.health import ServiceStatus
from weather_aggregator.providers.base import WeatherProvider

# Bucharest
PROBE_CITY = "Bucharest"
PROBE_LAT = 44.4268
PROBE_LONG = 26.1025


async def is_provider_available(provider: WeatherProvider) -> ServiceStatus:
    """Check a provider by fetching a reading for a known location.

    Args:
        provider: Provider to probe.

    Returns:
        ServiceStatus.available if the provider answered with a reading.
    """
    try:
        await asyncio.to_thread(
            provider.fetch_reading, PROBE_CITY, PROBE_LAT, PROBE_LONG
        )
    except WeatherServiceError as exc:
        logger.error("PROVIDER UNAVAILABLE", provider=provider.name, error=str(exc))
        return ServiceStatus.not_available
    logger.info("PROVIDER AVAILABLE", provider=provider.name)
    return ServiceStatus.available


async def provider_statuses(
    providers: Sequence[WeatherProvider],
) -> dict[str, ServiceStatus]:
    """Probe every provider concurrently.

    Returns:
        Availability keyed by provider name, in provider order.
    """
    statuses = await asyncio.gather(
        *(is_provider_available(provider) for provider in providers)
    )
    return {provider.name: status for provider, status in zip(providers, statuses)}
