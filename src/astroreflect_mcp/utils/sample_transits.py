"""Fixed transit catalogs for when real calculations come up short.

ILLUSTRATIVE pads a thin real result; FALLBACK replaces it entirely when the
ephemeris is unavailable. Both are anchored relative to the requested date.
"""

from datetime import datetime, timedelta

from ..constants import Aspect, Planet, TransitSubtype
from ..models import Transit
from .transit_types import transit_type_id

# (planet_a, aspect, planet_b, exact, start, end, description); offsets in days
ILLUSTRATIVE_CATALOG = [
    (
        Planet.SUN, Aspect.SQUARE, Planet.MARS, 1, 0, 2,
        "Sun square Mars brings energy and potential conflict. "
        "Channel this dynamic tension constructively.",
    ),
    (
        Planet.VENUS, Aspect.TRINE, Planet.JUPITER, -1, -3, 1,
        "Venus trine Jupiter brings harmony, optimism, and expansion to "
        "relationships and finances.",
    ),
]

FALLBACK_CATALOG = [
    (
        Planet.MERCURY, Aspect.CONJUNCTION, Planet.VENUS, 0, -1, 1,
        "Mercury conjunct Venus enhances communication in relationships "
        "and creative expression.",
    ),
    (
        Planet.MOON, Aspect.OPPOSITION, Planet.SATURN, 2, 1.5, 2.5,
        "Moon opposite Saturn may bring emotional challenges and a need for boundaries.",
    ),
    (
        Planet.SUN, Aspect.TRINE, Planet.JUPITER, 3, 1, 5,
        "Sun trine Jupiter brings optimism, growth opportunities, and expanded horizons.",
    ),
]


def _from_catalog(catalog: list[tuple], date: datetime) -> list[Transit]:
    transits = []
    for planet_a, aspect, planet_b, exact, start, end, description in catalog:
        transits.append(Transit(
            transit_type_id=transit_type_id(planet_a, planet_b, aspect),
            planet_a=planet_a,
            planet_b=planet_b,
            aspect=aspect,
            subtype=TransitSubtype.STANDARD,
            exact_date=date + timedelta(days=exact),
            start_date=date + timedelta(days=start),
            end_date=date + timedelta(days=end),
            description=description,
        ))
    return transits


def illustrative_transits(date: datetime) -> list[Transit]:
    return _from_catalog(ILLUSTRATIVE_CATALOG, date)


def fallback_transits(date: datetime) -> list[Transit]:
    return _from_catalog(FALLBACK_CATALOG, date)
