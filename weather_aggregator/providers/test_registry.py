import pytest

from weather_aggregator.providers.darksky import DarkSky
from weather_aggregator.providers.openweathermap import OpenWeatherMap
from weather_aggregator.providers.registry import build_providers


def test_build_providers_keeps_order():
    providers = build_providers(["darksky", "openweathermap"])
    assert [type(p) for p in providers] == [DarkSky, OpenWeatherMap]


def test_default_order(monkeypatch):
    monkeypatch.setattr(
        "weather_aggregator.config.WEATHER_PROVIDERS", ["openweathermap", "darksky"]
    )
    assert [p.name for p in build_providers()] == ["openweathermap", "darksky"]


def test_unknown_provider_raises():
    with pytest.raises(ValueError, match="metoffice"):
        build_providers(["openweathermap", "metoffice"])


def test_empty_provider_list_raises():
    with pytest.raises(ValueError):
        build_providers([])
