"""Temperature helpers for Honeywell Evohome zones."""

from __future__ import annotations

import math
from typing import Any

from .const import TemperatureRoundingMode
from .models import Zone


def round_temperature(value: Any, mode: TemperatureRoundingMode | str | None = None) -> float | None:
    """Round a measured temperature according to the configured mode.

    Args:
        value: Raw temperature (number or numeric string)
        mode: Rounding mode, defaults to no rounding

    Returns:
        Rounded temperature, or None if the value is missing or not numeric.

    Example:
        >>> round_temperature(20.26, "half_degree")
        20.5
        >>> round_temperature("20.26", "single_decimal")
        20.3
    """
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None

    mode = TemperatureRoundingMode(mode or TemperatureRoundingMode.NONE)
    if mode is TemperatureRoundingMode.SINGLE_DECIMAL:
        return math.floor(number * 10 + 0.5) / 10
    if mode is TemperatureRoundingMode.HALF_DEGREE:
        return math.floor(number * 2 + 0.5) / 2
    return number


def target_temperature_options(zone: Zone) -> dict[str, float | None]:
    """Return min/max/step for a zone's target temperature."""
    capabilities = zone.setpoint_capabilities
    return {
        "min": capabilities.min_heat_setpoint,
        "max": capabilities.max_heat_setpoint,
        "step": capabilities.value_resolution,
    }
