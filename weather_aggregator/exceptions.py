"""Exception hierarchy shared by the converter, providers, and aggregator."""


class WeatherServiceError(Exception):
    """Base exception for weather service failures."""
    pass


class ConversionError(WeatherServiceError, ValueError):
    """Raised when a temperature is below absolute zero for its scale."""
    pass


class ProviderError(WeatherServiceError):
    """Base exception for a single provider's failure."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class NetworkError(ProviderError):
    """Raised when a provider cannot be reached or answers with a bad status."""
    pass


class DecodeError(ProviderError):
    """Raised when a provider returns a malformed or unexpected payload."""
    pass


class UnitError(ProviderError):
    """Raised when a provider reports a unit flag we do not understand."""
    pass


class AggregationError(WeatherServiceError):
    """Raised when an aggregation cannot produce a result.

    Wraps the first provider failure, in provider order.
    """

    def __init__(self, provider: str, error: Exception):
        super().__init__(f"Provider {provider} failed: {error}")
        self.provider = provider
        self.error = error
