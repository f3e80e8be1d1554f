"""Fan out to every weather provider and combine their readings."""

import contextvars
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from prometheus_client import Counter

from weather_aggregator.exceptions import AggregationError, WeatherServiceError
from weather_aggregator.logging_config import logger
from weather_aggregator.models.reading import AggregateResult, ProviderFailure, Reading
from weather_aggregator.providers.base import WeatherProvider

# "unknown" counts calls that returned no temperature, e.g. Dark Sky
# skipping the request for lack of coordinates.
PROVIDER_CALLS = Counter(
    "provider_calls_total", "Weather provider calls", ["provider", "outcome"]
)

Outcome = tuple[WeatherProvider, Reading | None, WeatherServiceError | None]


def _call(provider: WeatherProvider, city: str, lat: float, long: float) -> Outcome:
    try:
        reading = provider.fetch_reading(city, lat, long)
    except WeatherServiceError as exc:
        PROVIDER_CALLS.labels(provider=provider.name, outcome="error").inc()
        return provider, None, exc
    outcome = "ok" if reading.kelvin > 0 else "unknown"
    PROVIDER_CALLS.labels(provider=provider.name, outcome=outcome).inc()
    return provider, reading, None


def _collect(
    providers: Sequence[WeatherProvider],
    city: str,
    lat: float,
    long: float,
    concurrent: bool,
    stop_on_error: bool,
) -> list[Outcome]:
    """Query every provider and return outcomes in provider order.

    An unexpected (non-service) exception is raised at its position in
    provider order, unless an earlier service failure already stops the
    aggregation.
    """
    if not concurrent or len(providers) < 2:
        outcomes = []
        for provider in providers:
            outcome = _call(provider, city, lat, long)
            outcomes.append(outcome)
            if stop_on_error and outcome[2] is not None:
                break
        return outcomes

    with ThreadPoolExecutor(max_workers=len(providers)) as executor:
        # One context copy per call; carries bound request_id into provider logs.
        futures = [
            executor.submit(
                contextvars.copy_context().run, _call, provider, city, lat, long
            )
            for provider in providers
        ]
        outcomes = []
        for future in futures:
            exc = future.exception()
            if exc is not None:
                if stop_on_error and any(error is not None for _, _, error in outcomes):
                    break
                raise exc
            outcomes.append(future.result())
        return outcomes


def aggregate(
    providers: Sequence[WeatherProvider],
    city: str,
    lat: float = 0.0,
    long: float = 0.0,
    *,
    concurrent: bool = False,
    tolerate_failures: bool = False,
) -> AggregateResult:
    """Average the current temperature reported by every provider.

    Every provider sees the caller's original coordinates. Readings with a
    Kelvin value of zero or less are left out of the average. The first
    reading carrying coordinates fills in the location when the caller did
    not supply one; later readings never replace it.

    Args:
        providers: Providers to query, in priority order.
        city: City name, passed through verbatim.
        lat: Latitude, 0.0 when unknown.
        long: Longitude, 0.0 when unknown.
        concurrent: Query providers in parallel threads.
        tolerate_failures: Record provider errors and average the rest
            instead of failing the whole aggregation.

    Returns:
        The resolved coordinates and average Celsius temperature. The
        temperature is NaN when no reading contributed.

    Raises:
        AggregationError: On the first provider failure in provider order,
            or, when tolerating failures, if every provider failed.
    """
    log = logger.bind(city=city)
    outcomes = _collect(
        providers, city, lat, long, concurrent, stop_on_error=not tolerate_failures
    )

    total = 0.0
    count = 0
    resolved_lat, resolved_long = lat, long
    failures: list[ProviderFailure] = []
    first_error: tuple[WeatherProvider, WeatherServiceError] | None = None

    for provider, reading, error in outcomes:
        if error is not None:
            log.error("PROVIDER_FAILED", provider=provider.name, error=str(error))
            if first_error is None:
                first_error = (provider, error)
            if not tolerate_failures:
                raise AggregationError(provider.name, error) from error
            failures.append(ProviderFailure(provider=provider.name, error=str(error)))
            continue

        # 0 Kelvin is treated as a bad measurement.
        if reading.kelvin > 0:
            total += reading.celsius
            count += 1
        else:
            log.debug("PROVIDER_READING_SKIPPED", provider=provider.name)

        if reading.has_coordinates and resolved_lat == 0.0 and resolved_long == 0.0:
            resolved_lat, resolved_long = reading.latitude, reading.longitude

    if first_error is not None and len(failures) == len(outcomes):
        provider, error = first_error
        raise AggregationError(provider.name, error) from error

    if count == 0:
        log.warning("NO_PROVIDER_TEMPERATURE", providers=len(outcomes))
        average = float("nan")
    else:
        average = total / count

    if failures:
        log.warning("PARTIAL_AGGREGATION", failed=[f.provider for f in failures])

    return AggregateResult(
        latitude=resolved_lat,
        longitude=resolved_long,
        celsius=average,
        contributors=count,
        failures=failures,
    )
