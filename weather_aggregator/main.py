"""FastAPI application routes, middleware, and metrics."""

import time
import uuid
from functools import lru_cache

from fastapi import Depends, FastAPI, Path, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from weather_aggregator import config
from weather_aggregator.exceptions import WeatherServiceError
from weather_aggregator.health.health_check import provider_statuses
from weather_aggregator.logging_config import logger
from weather_aggregator.models.health import HealthResponse
from weather_aggregator.models.reading import CITY_PATTERN, Query
from weather_aggregator.models.weather import WeatherResponse
from weather_aggregator.providers.base import WeatherProvider
from weather_aggregator.providers.registry import build_providers
from weather_aggregator.weather_service.aggregator import aggregate
from structlog.contextvars import bind_contextvars, clear_contextvars

app = FastAPI()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "path", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request duration in seconds", ["path"]
)


@lru_cache
def get_providers() -> tuple[WeatherProvider, ...]:
    """Return the provider list, built once from configuration."""
    return tuple(build_providers())


@app.middleware("http")
async def request_logging(request: Request, call_next):
    """Log request details, attach a request ID, and record metrics.

    Args:
        request: Incoming HTTP request.
        call_next: FastAPI handler for the next middleware/app.

    Returns:
        The response produced by the downstream handler.
    """
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    bind_contextvars(request_id=request_id)
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response
    finally:
        duration_s = time.perf_counter() - start
        duration_ms = round(duration_s * 1000, 2)
        status_code = getattr(response, "status_code", 500)
        logger.info(
            "HTTP_REQUEST",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
        REQUEST_COUNT.labels(
            method=request.method, path=request.url.path, status_code=status_code
        ).inc()
        REQUEST_LATENCY.labels(path=request.url.path).observe(duration_s)
        clear_contextvars()


@app.exception_handler(WeatherServiceError)
async def weather_service_error_handler(request: Request, exc: WeatherServiceError):
    """Convert weather service errors into opaque 500 responses.

    Args:
        request: Incoming HTTP request.
        exc: Raised weather service error.

    Returns:
        A JSON response with a generic error message.
    """
    logger.error("WEATHER_REQUEST_FAILED", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": "Unexpected error"})


@app.get("/")
async def root():
    """Return a basic liveness response."""
    return {"message": "Hello World"}


@app.get("/weather/{city}")
def get_weather_for_city(
    city: str = Path(min_length=1, pattern=CITY_PATTERN),
    lat: float = 0.0,
    long: float = 0.0,
    providers: tuple[WeatherProvider, ...] = Depends(get_providers),
) -> WeatherResponse:
    """Average the current temperature for a city across all providers.

    Runs in FastAPI's threadpool since provider calls block.

    Args:
        city: City name from the path.
        lat: Optional latitude, 0.0 when unknown.
        long: Optional longitude, 0.0 when unknown.
        providers: Providers to query, in order.

    Returns:
        Display-formatted coordinates, temperature, and latency.
    """
    begin = time.perf_counter()
    query = Query(city=city, latitude=lat, longitude=long)
    result = aggregate(
        providers,
        query.city,
        query.latitude,
        query.longitude,
        concurrent=config.AGGREGATE_CONCURRENTLY,
        tolerate_failures=config.TOLERATE_PROVIDER_FAILURES,
    )
    weather = WeatherResponse.from_result(
        query.city, result, time.perf_counter() - begin
    )
    logger.info(
        "WEATHER_AGGREGATED",
        city=weather.city,
        latitude=weather.lat,
        longitude=weather.long,
        temperature=weather.temp,
        contributors=result.contributors,
    )
    return weather


@app.get("/health", response_model=HealthResponse)
async def health(
    providers: tuple[WeatherProvider, ...] = Depends(get_providers),
) -> HealthResponse:
    """Report API health and provider availability.

    Returns:
        A HealthResponse containing per-provider status.
    """
    return HealthResponse(status="ok", dependencies=await provider_statuses(providers))


@app.get("/metrics")
async def metrics():
    """Expose Prometheus metrics for scraping."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
