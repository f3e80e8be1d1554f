"""Provider readings and aggregation results."""

import math

from pydantic import BaseModel, ConfigDict, Field

# At least one non-whitespace character.
CITY_PATTERN = r"^\s*\S"


class Reading(BaseModel):
    """One provider's temperature for one query.

    The three scales describe the same temperature. Coordinates of
    (0.0, 0.0) mean the provider did not report a location.
    """

    model_config = ConfigDict(frozen=True)

    celsius: float = 0.0
    fahrenheit: float = 0.0
    kelvin: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0

    @classmethod
    def unknown(cls) -> "Reading":
        """Return the all-zero reading used when a provider has nothing to say."""
        return cls()

    @property
    def has_coordinates(self) -> bool:
        return self.latitude != 0.0 and self.longitude != 0.0


class Query(BaseModel):
    """Aggregation input; (0.0, 0.0) means the caller does not know the location."""

    city: str = Field(min_length=1, pattern=CITY_PATTERN)
    latitude: float = 0.0
    longitude: float = 0.0


class ProviderFailure(BaseModel):
    """A provider error recorded instead of raised."""

    provider: str
    error: str


class AggregateResult(BaseModel):
    """Resolved coordinates and averaged Celsius temperature."""

    latitude: float
    longitude: float
    celsius: float  # NaN when no reading contributed
    contributors: int = 0
    failures: list[ProviderFailure] = Field(default_factory=list)

    @property
    def has_temperature(self) -> bool:
        return not math.isnan(self.celsius)
