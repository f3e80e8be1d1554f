import math
import threading

import pytest
from prometheus_client import REGISTRY
from structlog.contextvars import bind_contextvars, clear_contextvars, get_contextvars

from weather_aggregator.exceptions import AggregationError, NetworkError, UnitError
from weather_aggregator.models.reading import Reading
from weather_aggregator.providers.base import WeatherProvider
from weather_aggregator.weather_service.aggregator import aggregate


class FakeProvider(WeatherProvider):
    def __init__(self, name, reading=None, error=None, wait_for=None, done=None):
        self.name = name
        self.reading = reading or Reading.unknown()
        self.error = error
        self.wait_for = wait_for
        self.done = done
        self.calls = []

    def fetch_reading(self, city, lat, long):
        self.calls.append((city, lat, long))
        if self.wait_for is not None:
            assert self.wait_for.wait(timeout=5)
        if self.done is not None:
            self.done.set()
        if self.error is not None:
            raise self.error
        return self.reading


def celsius(value, lat=0.0, long=0.0):
    return Reading(
        celsius=value,
        fahrenheit=value * 9 / 5 + 32,
        kelvin=value + 273.15,
        latitude=lat,
        longitude=long,
    )


def test_zero_kelvin_reading_is_excluded_from_average():
    providers = [
        FakeProvider("a", Reading.unknown()),
        FakeProvider("b", celsius(20.0)),
    ]
    result = aggregate(providers, "Bucharest")
    assert result.celsius == pytest.approx(20.0)
    assert result.contributors == 1


def test_average_of_all_valid_readings():
    providers = [FakeProvider("a", celsius(10.0)), FakeProvider("b", celsius(21.0))]
    assert aggregate(providers, "Bucharest").celsius == pytest.approx(15.5)


def test_coordinates_resolved_from_first_provider_with_location():
    providers = [
        FakeProvider("a", celsius(18.0, 44.4268, 26.1025)),
        FakeProvider("b", Reading.unknown()),
    ]
    result = aggregate(providers, "Bucharest", 0.0, 0.0)
    assert (result.latitude, result.longitude) == (44.4268, 26.1025)


def test_first_provider_coordinates_win():
    providers = [
        FakeProvider("a", celsius(18.0, 44.4268, 26.1025)),
        FakeProvider("b", celsius(19.0, 41.6267, -93.7122)),
    ]
    result = aggregate(providers, "Bucharest")
    assert (result.latitude, result.longitude) == (44.4268, 26.1025)


def test_caller_coordinates_are_never_overwritten():
    providers = [FakeProvider("a", celsius(18.0, 44.4268, 26.1025))]
    result = aggregate(providers, "Urbandale", 41.6267, -93.7122)
    assert (result.latitude, result.longitude) == (41.6267, -93.7122)


def test_half_zero_coordinates_are_ignored():
    providers = [
        FakeProvider("a", celsius(18.0, 44.4268, 0.0)),
        FakeProvider("b", celsius(18.0, 41.6267, -93.7122)),
    ]
    result = aggregate(providers, "Urbandale")
    assert (result.latitude, result.longitude) == (41.6267, -93.7122)


def test_every_provider_sees_original_coordinates():
    first = FakeProvider("a", celsius(18.0, 44.4268, 26.1025))
    second = FakeProvider("b", celsius(18.0))
    aggregate([first, second], "Bucharest")
    assert first.calls == [("Bucharest", 0.0, 0.0)]
    assert second.calls == [("Bucharest", 0.0, 0.0)]


def test_no_valid_reading_gives_nan():
    providers = [FakeProvider("a"), FakeProvider("b")]
    result = aggregate(providers, "Atlantis")
    assert math.isnan(result.celsius)
    assert not result.has_temperature
    assert result.contributors == 0


def test_empty_provider_list_gives_nan():
    result = aggregate([], "Atlantis", 1.0, 2.0)
    assert math.isnan(result.celsius)
    assert (result.latitude, result.longitude) == (1.0, 2.0)


def test_provider_failure_aborts_aggregation():
    error = NetworkError("a", "connection refused")
    failing = FakeProvider("a", error=error)
    later = FakeProvider("b", celsius(20.0))
    with pytest.raises(AggregationError) as exc_info:
        aggregate([failing, later], "Bucharest")
    assert exc_info.value.provider == "a"
    assert exc_info.value.error is error
    assert exc_info.value.__cause__ is error
    assert later.calls == []


def test_first_failure_in_provider_order_is_reported_concurrently():
    first_error = UnitError("a", "unexpected unit type 'ca'")
    providers = [
        FakeProvider("a", error=first_error),
        FakeProvider("b", error=NetworkError("b", "timeout")),
    ]
    with pytest.raises(AggregationError) as exc_info:
        aggregate(providers, "Bucharest", concurrent=True)
    assert exc_info.value.error is first_error


def test_concurrent_order_does_not_depend_on_completion():
    b_done = threading.Event()
    slow = FakeProvider("a", celsius(18.0, 44.4268, 26.1025), wait_for=b_done)
    fast = FakeProvider("b", celsius(22.0, 41.6267, -93.7122), done=b_done)
    result = aggregate([slow, fast], "Bucharest", concurrent=True)
    assert (result.latitude, result.longitude) == (44.4268, 26.1025)
    assert result.celsius == pytest.approx(20.0)


def test_tolerant_mode_averages_successes():
    providers = [
        FakeProvider("a", error=NetworkError("a", "timeout")),
        FakeProvider("b", celsius(20.0, 44.4268, 26.1025)),
    ]
    result = aggregate(providers, "Bucharest", tolerate_failures=True)
    assert result.celsius == pytest.approx(20.0)
    assert (result.latitude, result.longitude) == (44.4268, 26.1025)
    assert [f.provider for f in result.failures] == ["a"]
    assert "timeout" in result.failures[0].error


def test_tolerant_mode_raises_when_every_provider_fails():
    first_error = NetworkError("a", "timeout")
    providers = [
        FakeProvider("a", error=first_error),
        FakeProvider("b", error=NetworkError("b", "timeout")),
    ]
    with pytest.raises(AggregationError) as exc_info:
        aggregate(providers, "Bucharest", tolerate_failures=True)
    assert exc_info.value.error is first_error


class ContextRecordingProvider(FakeProvider):
    def fetch_reading(self, city, lat, long):
        self.context = get_contextvars()
        return super().fetch_reading(city, lat, long)


def test_concurrent_calls_see_bound_request_id():
    providers = [
        ContextRecordingProvider("a", celsius(18.0)),
        ContextRecordingProvider("b", celsius(22.0)),
    ]
    bind_contextvars(request_id="req-42")
    try:
        aggregate(providers, "Bucharest", concurrent=True)
    finally:
        clear_contextvars()
    assert [p.context.get("request_id") for p in providers] == ["req-42", "req-42"]


def test_concurrent_unexpected_error_after_failure_reports_first_failure():
    first_error = NetworkError("a", "timeout")
    providers = [
        FakeProvider("a", error=first_error),
        FakeProvider("b", error=RuntimeError("boom")),
    ]
    with pytest.raises(AggregationError) as exc_info:
        aggregate(providers, "Bucharest", concurrent=True)
    assert exc_info.value.error is first_error


def test_concurrent_unexpected_error_is_raised_in_provider_order():
    providers = [
        FakeProvider("a", error=RuntimeError("boom")),
        FakeProvider("b", error=NetworkError("b", "timeout")),
    ]
    with pytest.raises(RuntimeError, match="boom"):
        aggregate(providers, "Bucharest", concurrent=True)


def _calls(provider, outcome):
    value = REGISTRY.get_sample_value(
        "provider_calls_total", {"provider": provider, "outcome": outcome}
    )
    return value or 0.0


def test_calls_without_temperature_are_counted_as_unknown():
    before_unknown = _calls("metrics-skip", "unknown")
    before_ok = _calls("metrics-skip", "ok")
    aggregate([FakeProvider("metrics-skip", Reading.unknown())], "Bucharest")
    assert _calls("metrics-skip", "unknown") == before_unknown + 1
    assert _calls("metrics-skip", "ok") == before_ok

    before_ok = _calls("metrics-ok", "ok")
    aggregate([FakeProvider("metrics-ok", celsius(20.0))], "Bucharest")
    assert _calls("metrics-ok", "ok") == before_ok + 1
