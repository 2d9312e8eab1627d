"""Sign ingress scanning.

Steps one day at a time across a range and reports every day on which a
planet's sign differs from the previous sample. Precision is one day; the
ingress is anchored at the first sampled moment in the new sign.

For each ingress two records are produced: the INGRESS event itself and a
"{planet} in {sign}" TRANSIT whose length is the planet's typical dwell time,
capped at the end of the query range.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from ..constants import SIGN_DWELL_DAYS, Planet, TransitSubtype, TransitTiming, ZodiacSign
from ..models import PlanetPosition, Transit
from .descriptions import describe_ingress, describe_sign_transit
from .position_utils import sign_for_longitude
from .time_utils import daily_moments, end_of_day, start_of_day
from .transit_types import transit_type_id

PositionFn = Callable[[Planet, datetime], PlanetPosition]


@dataclass(frozen=True)
class SignIngress:
    planet: Planet
    moment: datetime
    from_sign: ZodiacSign
    to_sign: ZodiacSign


def scan_sign_ingresses(
    position: PositionFn,
    planet: Planet,
    start: datetime,
    end: datetime,
) -> list[SignIngress]:
    """Every sign change of `planet` between start and end, day precision.

    Raises:
        Whatever `position` raises, or SignDeterminationError.
    """
    ingresses = []
    previous_sign = None

    for moment in daily_moments(start, end):
        sign = sign_for_longitude(position(planet, moment).longitude)
        if previous_sign is not None and sign != previous_sign:
            ingresses.append(SignIngress(planet, moment, previous_sign, sign))
        previous_sign = sign

    return ingresses


def ingress_transit(ingress: SignIngress) -> Transit:
    """The INGRESS record, spanning the calendar day of the ingress."""
    return Transit(
        transit_type_id=transit_type_id(
            ingress.planet, sign=ingress.to_sign, subtype=TransitSubtype.INGRESS
        ),
        planet_a=ingress.planet,
        sign=ingress.to_sign,
        subtype=TransitSubtype.INGRESS,
        exact_date=ingress.moment,
        start_date=start_of_day(ingress.moment),
        end_date=end_of_day(ingress.moment),
        description=describe_ingress(ingress.planet, ingress.to_sign),
    )


def sign_transit_after_ingress(ingress: SignIngress, range_end: datetime) -> Transit:
    """'{planet} in {sign}' from the ingress for the typical dwell time."""
    dwell = timedelta(days=SIGN_DWELL_DAYS[ingress.planet])
    end = min(ingress.moment + dwell, range_end)
    # The ingress can sit on range_end itself (last daily sample)
    end = max(end, ingress.moment)

    return Transit(
        transit_type_id=transit_type_id(
            ingress.planet, sign=ingress.to_sign, subtype=TransitSubtype.TRANSIT
        ),
        planet_a=ingress.planet,
        sign=ingress.to_sign,
        subtype=TransitSubtype.TRANSIT,
        exact_date=ingress.moment,
        start_date=ingress.moment,
        end_date=end,
        description=describe_sign_transit(ingress.planet, ingress.to_sign),
    )


def current_sign_transit(planet: Planet, longitude: float, now: datetime) -> Transit:
    """Snapshot of the sign a planet occupies now, marked ACTIVE.

    Raises:
        SignDeterminationError: If the longitude is not finite.
    """
    sign = sign_for_longitude(longitude)
    half_dwell = timedelta(days=SIGN_DWELL_DAYS[planet] / 2)

    return Transit(
        transit_type_id=transit_type_id(planet, sign=sign, subtype=TransitSubtype.TRANSIT),
        planet_a=planet,
        sign=sign,
        subtype=TransitSubtype.TRANSIT,
        exact_date=now,
        start_date=start_of_day(now - half_dwell),
        end_date=end_of_day(now + half_dwell),
        description=describe_sign_transit(planet, sign),
        timing=TransitTiming.ACTIVE,
    )
