"""Temperature conversions bounded by absolute zero."""

from weather_aggregator.exceptions import ConversionError

KELVIN_SHIFT = 273.15
ABSOLUTE_ZERO_F = -459.67


def celsius_to_kelvin(c: float) -> float:
    """Convert Celsius to Kelvin.

    Raises:
        ConversionError: If c is below -273.15.
    """
    if c < -KELVIN_SHIFT:
        raise ConversionError(f"celsius_to_kelvin: {c} out of range")
    return c + KELVIN_SHIFT


def kelvin_to_celsius(k: float) -> float:
    """Convert Kelvin to Celsius.

    Raises:
        ConversionError: If k is negative.
    """
    if k < 0:
        raise ConversionError(f"kelvin_to_celsius: {k} out of range")
    return k - KELVIN_SHIFT


def fahrenheit_to_celsius(f: float) -> float:
    """Convert Fahrenheit to Celsius.

    Raises:
        ConversionError: If f is below -459.67.
    """
    if f < ABSOLUTE_ZERO_F:
        raise ConversionError(f"fahrenheit_to_celsius: {f} out of range")
    return (f - 32) * 5 / 9


def celsius_to_fahrenheit(c: float) -> float:
    """Convert Celsius to Fahrenheit.

    Raises:
        ConversionError: If c is below -273.15.
    """
    if c < -KELVIN_SHIFT:
        raise ConversionError(f"celsius_to_fahrenheit: {c} out of range")
    return (c * 9 / 5) + 32


def kelvin_to_fahrenheit(k: float) -> float:
    """Convert Kelvin to Fahrenheit.

    Raises:
        ConversionError: If k is negative.
    """
    if k < 0:
        raise ConversionError(f"kelvin_to_fahrenheit: {k} out of range")
    return ((k - KELVIN_SHIFT) * 9 / 5) + 32
