"""Aspect matching and exact-moment search.

An aspect holds when the shortest separation between two longitudes is
within an orb of the aspect's target angle. The orb depends on the aspect
and on the most generous category either planet belongs to:

    luminary (Sun, Moon) > personal (Mercury, Venus, Mars)
        > social (Jupiter, Saturn) > outer (Uranus, Neptune, Pluto)

The exact-moment search is a coarse grid minimum, not a root finder: its
precision is bounded by (end - start) / steps.
"""

from datetime import datetime
from typing import Callable, Optional

from ..constants import (
    Aspect, Planet,
    LUMINARIES, PERSONAL_PLANETS, SOCIAL_PLANETS,
)
from ..models import PlanetPosition
from .position_utils import angular_separation
from .time_utils import sample_grid

PositionFn = Callable[[Planet, datetime], PlanetPosition]

LUMINARY = "luminary"
PERSONAL = "personal"
SOCIAL = "social"
OUTER = "outer"

# Orbs in degrees, widest for conjunction/opposition and for the luminaries.
ASPECT_ORBS: dict[Aspect, dict[str, float]] = {
    Aspect.CONJUNCTION: {LUMINARY: 10.0, PERSONAL: 8.0, SOCIAL: 7.0, OUTER: 6.0},
    Aspect.OPPOSITION:  {LUMINARY: 10.0, PERSONAL: 8.0, SOCIAL: 7.0, OUTER: 6.0},
    Aspect.SQUARE:      {LUMINARY: 8.0,  PERSONAL: 7.0, SOCIAL: 6.0, OUTER: 5.0},
    Aspect.TRINE:       {LUMINARY: 8.0,  PERSONAL: 7.0, SOCIAL: 6.0, OUTER: 5.0},
    Aspect.SEXTILE:     {LUMINARY: 5.0,  PERSONAL: 4.0, SOCIAL: 3.0, OUTER: 2.0},
}

# Stop scanning once a sample is this close to exact.
EXACT_EARLY_STOP = 0.1
# A best residual above this means the peak is not resolvable in range.
EXACT_MAX_RESIDUAL = 1.0


def planet_category(planet_a: Planet, planet_b: Planet) -> str:
    """Most generous category either planet belongs to."""
    pair = {planet_a, planet_b}
    if pair & LUMINARIES:
        return LUMINARY
    if pair & PERSONAL_PLANETS:
        return PERSONAL
    if pair & SOCIAL_PLANETS:
        return SOCIAL
    return OUTER


def get_orb(aspect: Aspect, planet_a: Planet, planet_b: Planet) -> float:
    """Orb in degrees for this aspect between these two planets."""
    return ASPECT_ORBS[aspect][planet_category(planet_a, planet_b)]


def aspect_residual(longitude_a: float, longitude_b: float, aspect: Aspect) -> float:
    """How far (degrees) the pair is from the exact aspect angle."""
    return abs(angular_separation(longitude_a, longitude_b) - aspect.angle)


def matches(
    longitude_a: float,
    longitude_b: float,
    aspect: Aspect,
    planet_a: Planet,
    planet_b: Planet,
) -> bool:
    """Return True if the two longitudes form `aspect` within orb.

    Symmetric in A/B and correct across the 0°/360° seam.

    Example:
        matches(355.0, 5.0, Aspect.CONJUNCTION, Planet.SUN, Planet.MOON) -> True
    """
    orb = get_orb(aspect, planet_a, planet_b)
    return aspect_residual(longitude_a, longitude_b, aspect) <= orb


def find_exact_moment(
    position: PositionFn,
    planet_a: Planet,
    planet_b: Planet,
    aspect: Aspect,
    start: datetime,
    end: datetime,
    steps: int = 20,
) -> Optional[datetime]:
    """Sampled moment in [start, end] where the aspect is closest to exact.

    Samples steps + 1 evenly spaced moments and keeps the one with the
    smallest residual, stopping early once a residual drops below 0.1°.

    Returns:
        The best sampled moment, or None if even the best residual exceeds 1°.

    Raises:
        Whatever `position` raises; callers decide whether to skip.
    """
    best_moment: Optional[datetime] = None
    best_residual = 360.0

    for moment in sample_grid(start, end, steps):
        pos_a = position(planet_a, moment)
        pos_b = position(planet_b, moment)
        residual = aspect_residual(pos_a.longitude, pos_b.longitude, aspect)

        if residual < best_residual:
            best_residual = residual
            best_moment = moment

        if residual < EXACT_EARLY_STOP:
            break

    if best_residual > EXACT_MAX_RESIDUAL:
        return None
    return best_moment
