"""Weather provider contract and the shared HTTP helper."""

from abc import ABC, abstractmethod

import httpx

from weather_aggregator.exceptions import DecodeError, NetworkError
from weather_aggregator.logging_config import logger
from weather_aggregator.models.reading import Reading


class WeatherProvider(ABC):
    """A third-party source able to report the current temperature."""

    name: str = "provider"

    @abstractmethod
    def fetch_reading(self, city: str, lat: float, long: float) -> Reading:
        """Fetch the current temperature for a city and/or coordinate pair.

        Args:
            city: City name, passed through verbatim.
            lat: Latitude, 0.0 when unknown.
            long: Longitude, 0.0 when unknown.

        Returns:
            A Reading with all three scales filled in.

        Raises:
            NetworkError: If the provider cannot be reached.
            DecodeError: If the payload is malformed.
            UnitError: If the payload reports an unknown unit.
            ConversionError: If the temperature is physically impossible.
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def request_json(
    *,
    url: str,
    params: dict | None,
    timeout: float,
    provider: str,
    log_context: dict,
) -> dict:
    """Execute a single HTTP GET and decode a JSON object body.

    Args:
        url: The URL to call.
        params: Query parameters to include in the request.
        timeout: Request timeout in seconds.
        provider: Provider name used in logs and errors.
        log_context: Extra log fields for all events.

    Returns:
        The decoded JSON object.

    Raises:
        NetworkError: On transport failure, timeout, or a non-2xx status.
        DecodeError: When the body is not a JSON object.
    """
    try:
        response = httpx.get(url, params=params, timeout=timeout)
        logger.info(
            "PROVIDER_RESPONSE",
            provider=provider,
            **log_context,
            status=response.status_code,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        status_code = exc.response.status_code
        logger.error(
            "PROVIDER_BAD_STATUS", provider=provider, **log_context, status=status_code
        )
        raise NetworkError(provider, f"unexpected status {status_code}") from exc
    except httpx.RequestError as exc:
        logger.error(
            "PROVIDER_REQUEST_FAILED", provider=provider, **log_context, error=str(exc)
        )
        raise NetworkError(provider, f"request failed: {exc}") from exc

    try:
        data = response.json()
    except ValueError as exc:
        logger.error("PROVIDER_BAD_PAYLOAD", provider=provider, **log_context)
        raise DecodeError(provider, "response body is not valid JSON") from exc
    if not isinstance(data, dict):
        logger.error("PROVIDER_BAD_PAYLOAD", provider=provider, **log_context)
        raise DecodeError(provider, "response body is not a JSON object")
    return data


def number_at(data: dict, *path: str, provider: str) -> float:
    """Return the numeric value found under a nested key path.

    Raises:
        DecodeError: If a key is missing or the value is not a number.
    """
    value = data
    for key in path:
        if not isinstance(value, dict) or key not in value:
            raise DecodeError(provider, f"missing field {'.'.join(path)}")
        value = value[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(provider, f"field {'.'.join(path)} is not a number")
    return float(value)
