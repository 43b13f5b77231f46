"""
Unit conversions and derived comfort metrics.
"""

import math
from typing import Optional, Tuple

KMH_PER_MS = 3.6
WIND_SPEED_PREFIX = "VV_"

WIND_CHILL_MAX_TEMP = 10.0
WIND_CHILL_MIN_WIND = 4.8  # km/h
MILD_WIND_MIN_WIND = 3.6  # km/h

_DIRECTIONS_SHORT = ["N", "NE", "E", "SE", "S", "SO", "O", "NO"]
_DIRECTIONS_FULL = [
    "Norte",
    "Noreste",
    "Este",
    "Sureste",
    "Sur",
    "Suroeste",
    "Oeste",
    "Noroeste",
]


def ms_to_kmh(value: float) -> float:
    """Convert a speed from meters per second to kilometers per hour."""
    return value * KMH_PER_MS


def kmh_to_ms(value: float) -> float:
    """Convert a speed from kilometers per hour to meters per second."""
    return value / KMH_PER_MS


def is_wind_speed_code(parameter_code: str) -> bool:
    return parameter_code.startswith(WIND_SPEED_PREFIX)


def convert_wind_speed(
    parameter_code: str, value: Optional[float], unit: str
) -> Tuple[Optional[float], str]:
    """
    Normalize a wind speed reading to km/h.

    Only wind-speed codes reported in m/s are converted; everything else is
    returned unchanged.

    Returns:
        Tuple of (value, unit)
    """
    if is_wind_speed_code(parameter_code) and unit == "m/s":
        if value is None:
            return None, "km/h"
        return ms_to_kmh(value), "km/h"
    return value, unit


def apparent_temperature(
    temp_c: float, wind_kmh: float, humidity_pct: Optional[float] = None
) -> float:
    """
    Calculate the apparent ("feels like") temperature.

    - Wind chill (Environment Canada / NOAA) at or below 10°C with wind above 4.8 km/h
    - Heat index (Steadman) at or above 27°C with relative humidity of at least 40%
    - A mild wind adjustment above 3.6 km/h otherwise

    Both wind thresholds are exclusive: a wind of exactly 4.8 or 3.6 km/h
    leaves the temperature unchanged.

    Args:
        temp_c: Air temperature in °C
        wind_kmh: Wind speed in km/h
        humidity_pct: Relative humidity in % (optional)

    Returns:
        Apparent temperature in °C
    """
    if temp_c <= WIND_CHILL_MAX_TEMP and wind_kmh == WIND_CHILL_MIN_WIND:
        return temp_c

    if temp_c <= WIND_CHILL_MAX_TEMP and wind_kmh > WIND_CHILL_MIN_WIND:
        v = wind_kmh**0.16
        wind_chill = 13.12 + 0.6215 * temp_c - 11.37 * v + 0.3965 * temp_c * v
        return round(wind_chill, 1)

    if temp_c >= 27 and humidity_pct is not None and humidity_pct >= 40:
        t = temp_c
        rh = humidity_pct
        heat_index = (
            -8.78469475556
            + 1.61139411 * t
            + 2.33854883889 * rh
            - 0.14611605 * t * rh
            - 0.012308094 * t * t
            - 0.0164248277778 * rh * rh
            + 0.002211732 * t * t * rh
            + 0.00072546 * t * rh * rh
            - 0.000003582 * t * t * rh * rh
        )
        return round(heat_index, 1)

    if wind_kmh > MILD_WIND_MIN_WIND:
        # about half a degree less per 36 km/h of wind
        return round(temp_c - (wind_kmh / 36) * 0.5, 1)

    return temp_c


def wind_direction_name(degrees: float, full: bool = False) -> str:
    """
    Spanish compass name for a wind direction.

    Args:
        degrees: Direction in degrees (0-360)
        full: Return 'Suroeste' instead of 'SO'
    """
    # half-way sectors round up, so 22.5° is NE
    index = math.floor(degrees / 45 + 0.5) % 8
    return _DIRECTIONS_FULL[index] if full else _DIRECTIONS_SHORT[index]


def wind_direction_with_degrees(degrees: float) -> str:
    """Format a direction as e.g. 'Suroeste (225°)'."""
    return f"{wind_direction_name(degrees, full=True)} ({math.floor(degrees + 0.5)}°)"


def format_wind_speed(ms: float, decimals: int = 0) -> str:
    """Format a wind speed given in m/s as a km/h string."""
    return f"{ms_to_kmh(ms):.{decimals}f}"
