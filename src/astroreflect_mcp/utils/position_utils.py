"""Shared position conversion utilities.

Low-level math for ecliptic longitudes: normalisation, angular separation,
sign lookup and degree formatting. Used by the ephemeris engine, the aspect
matcher and the sign ingress scanner.
"""

import math
from typing import Any

from ..constants import ZodiacSign


class SignDeterminationError(Exception):
    """Raised when no zodiac band contains a longitude.

    Normalisation makes this unreachable for finite input, so seeing it means
    the caller passed NaN/inf or skipped normalisation.
    """
    pass


def normalize_longitude(longitude: float) -> float:
    """Normalise any longitude into [0, 360).

    Example:
        normalize_longitude(-5.0) -> 355.0
    """
    normalized = longitude % 360.0
    # -1e-15 % 360 rounds to exactly 360.0
    if normalized == 360.0:
        normalized = 0.0
    return normalized


def angular_separation(longitude_a: float, longitude_b: float) -> float:
    """Shortest angle between two longitudes, in degrees (0-180).

    Correct across the 0°/360° seam: 355° and 5° are 10° apart.
    """
    diff = abs(normalize_longitude(longitude_a) - normalize_longitude(longitude_b))
    if diff > 180.0:
        diff = 360.0 - diff
    return diff


def sign_for_longitude(longitude: float) -> ZodiacSign:
    """Return the zodiac sign whose band contains the longitude.

    Raises:
        SignDeterminationError: If the longitude is not a finite number.
    """
    if not math.isfinite(longitude):
        raise SignDeterminationError(f"Unable to determine sign for longitude {longitude!r}")
    norm = normalize_longitude(longitude)
    for sign in ZodiacSign:
        if sign.start <= norm < sign.end:
            return sign
    raise SignDeterminationError(f"Unable to determine sign for longitude {longitude!r}")


def decimal_to_dms(decimal_degrees: float) -> tuple[int, int, float]:
    """Convert decimal degrees to (degrees, minutes, seconds).

    Example:
        decimal_to_dms(14.66) -> (14, 39, 36.0)
    """
    degrees = int(decimal_degrees)
    remaining = (decimal_degrees - degrees) * 60
    minutes = int(remaining)
    seconds = (remaining - minutes) * 60
    return degrees, minutes, seconds


def sign_info(longitude: float) -> dict[str, Any]:
    """Convert an absolute ecliptic longitude (0-360°) to sign metadata.

    Returns a dict with:
        sign              ZodiacSign
        ruler             Planet ruling the sign
        element           str   - Fire, Earth, Air or Water
        degree            float - degrees within the sign (0-<30)
        percent_in_sign   float - how far through the sign (0-<100)
        formatted         str   - e.g. "14°39'"
        absolute_position float - normalised longitude
    """
    sign = sign_for_longitude(longitude)
    norm = normalize_longitude(longitude)
    degree_in_sign = norm - sign.start
    deg, minutes, _ = decimal_to_dms(degree_in_sign)

    return {
        "sign": sign,
        "ruler": sign.ruler,
        "element": sign.element,
        "degree": degree_in_sign,
        "percent_in_sign": degree_in_sign / 30.0 * 100.0,
        "formatted": f"{deg}°{minutes:02d}'",
        "absolute_position": norm,
    }
