"""Weather response model and display formatting helpers."""

from pydantic import BaseModel

from weather_aggregator.models.reading import AggregateResult


def _fraction(value: int, unit: int, digits: int) -> str:
    whole, rest = divmod(value, unit)
    if not rest:
        return str(whole)
    return f"{whole}.{rest:0{digits}d}".rstrip("0")


def format_duration(seconds: float) -> str:
    """Render an elapsed time the way Go's time.Duration prints it.

    The value is rounded to whole nanoseconds first.

    Args:
        seconds: Elapsed time in seconds.

    Returns:
        A compact string such as "812µs", "153.2ms", "1m2.5s" or
        "277h46m40s".
    """
    ns = round(seconds * 1e9)
    sign = "-" if ns < 0 else ""
    ns = abs(ns)
    if ns == 0:
        return "0s"
    if ns < 1_000:
        return f"{sign}{ns}ns"
    if ns < 1_000_000:
        return f"{sign}{_fraction(ns, 1_000, 3)}µs"
    if ns < 1_000_000_000:
        return f"{sign}{_fraction(ns, 1_000_000, 6)}ms"

    hours, ns = divmod(ns, 3_600_000_000_000)
    minutes, ns = divmod(ns, 60_000_000_000)
    secs = f"{_fraction(ns, 1_000_000_000, 9)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{secs}"
    if minutes:
        return f"{sign}{minutes}m{secs}"
    return f"{sign}{secs}"


class WeatherResponse(BaseModel):
    """Aggregated weather payload exposed by the API."""

    city: str
    lat: str
    long: str
    temp: str
    took: str

    @classmethod
    def from_result(
        cls, city: str, result: AggregateResult, elapsed_s: float
    ) -> "WeatherResponse":
        """Create a WeatherResponse from an aggregation result.

        Args:
            city: City name exactly as requested.
            result: Aggregated coordinates and temperature.
            elapsed_s: Request latency in seconds.

        Returns:
            A populated WeatherResponse with display-formatted values.
        """
        return cls(
            city=city,
            lat=f"{result.latitude:.4f}",
            long=f"{result.longitude:.4f}",
            temp=f"{result.celsius:.2f}°C",
            took=format_duration(elapsed_s),
        )
