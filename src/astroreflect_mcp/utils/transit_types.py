"""Canonical transit type identity.

A transit type id names the *kind* of event independent of when it occurs:

    {PLANET}_RETROGRADE           retrograde period
    {PLANET}_STATION              station (including stations direct)
    {PLANET}_INGRESS_{Sign}       sign ingress
    {PLANET}_IN_{Sign}            transit through a sign
    {LESSER}_{Aspect}_{GREATER}   two-body aspect, planets sorted by name

Sorting the planet pair is what makes Sun/Mercury and Mercury/Sun the same
kind, and the engine deduplicates on these ids.
"""

from typing import Optional

from ..constants import Aspect, Planet, TransitSubtype, ZodiacSign
from ..models import TransitType
from .descriptions import (
    describe_ingress,
    describe_retrograde,
    describe_sign_transit,
)


class TransitTypeError(ValueError):
    """Raised when the arguments match no transit type pattern."""
    pass


def transit_type_id(
    planet_a: Planet,
    planet_b: Optional[Planet] = None,
    aspect: Optional[Aspect] = None,
    sign: Optional[ZodiacSign] = None,
    subtype: TransitSubtype = TransitSubtype.STANDARD,
) -> str:
    """Generate the canonical id for a transit type.

    Raises:
        TransitTypeError: If the arguments match no id pattern.
    """
    if subtype == TransitSubtype.RETROGRADE:
        return f"{planet_a.value}_RETROGRADE"

    if subtype == TransitSubtype.STATION:
        return f"{planet_a.value}_STATION"

    if subtype == TransitSubtype.INGRESS and sign:
        return f"{planet_a.value}_INGRESS_{sign.value}"

    if subtype == TransitSubtype.TRANSIT and sign:
        return f"{planet_a.value}_IN_{sign.value}"

    if planet_b and aspect:
        lesser, greater = sorted([planet_a.value, planet_b.value])
        return f"{lesser}_{aspect.value}_{greater}"

    raise TransitTypeError(
        f"Invalid transit type parameters: planet_a={planet_a}, planet_b={planet_b}, "
        f"aspect={aspect}, sign={sign}, subtype={subtype}"
    )


def transit_type_name(
    planet_a: Planet,
    planet_b: Optional[Planet] = None,
    aspect: Optional[Aspect] = None,
    sign: Optional[ZodiacSign] = None,
    subtype: TransitSubtype = TransitSubtype.STANDARD,
) -> str:
    """Human-readable name for a transit type, e.g. 'Mars enters Leo'."""
    a = planet_a.display_name

    if subtype == TransitSubtype.RETROGRADE:
        return f"{a} Retrograde"
    if subtype == TransitSubtype.STATION:
        return f"{a} Station"
    if subtype == TransitSubtype.INGRESS and sign:
        return f"{a} enters {sign.value}"
    if subtype == TransitSubtype.TRANSIT and sign:
        return f"{a} in {sign.value}"
    if planet_b and aspect:
        return f"{a} {aspect.value} {planet_b.display_name}"

    raise TransitTypeError("Invalid transit type parameters")


def _transit_type_description(
    planet_a: Planet,
    planet_b: Optional[Planet],
    aspect: Optional[Aspect],
    sign: Optional[ZodiacSign],
    subtype: TransitSubtype,
) -> str:
    if subtype == TransitSubtype.RETROGRADE:
        return describe_retrograde(planet_a)
    if subtype == TransitSubtype.INGRESS and sign:
        return describe_ingress(planet_a, sign)
    if subtype == TransitSubtype.TRANSIT and sign:
        return describe_sign_transit(planet_a, sign)
    if planet_b and aspect:
        return (
            f"{planet_a.display_name} forms a {aspect.value.lower()} aspect with "
            f"{planet_b.display_name}, creating a specific energy pattern between "
            "these planetary influences."
        )
    return f"Transit type for {planet_a.display_name}"


def create_transit_type(
    planet_a: Planet,
    planet_b: Optional[Planet] = None,
    aspect: Optional[Aspect] = None,
    sign: Optional[ZodiacSign] = None,
    subtype: TransitSubtype = TransitSubtype.STANDARD,
) -> TransitType:
    """Build the full TransitType record (id, name, description).

    Raises:
        TransitTypeError: If the arguments match no id pattern.
    """
    return TransitType(
        id=transit_type_id(planet_a, planet_b, aspect, sign, subtype),
        planet_a=planet_a,
        planet_b=planet_b,
        aspect=aspect,
        sign=sign,
        subtype=subtype,
        name=transit_type_name(planet_a, planet_b, aspect, sign, subtype),
        description=_transit_type_description(planet_a, planet_b, aspect, sign, subtype),
    )


def transit_type_from_id(type_id: str) -> Optional[TransitType]:
    """Parse a transit type id back into its structural fields.

    Returns:
        TransitType, or None if the id does not parse.
    """
    parts = type_id.split("_")
    try:
        if len(parts) == 2 and parts[1] == "RETROGRADE":
            return create_transit_type(Planet(parts[0]), subtype=TransitSubtype.RETROGRADE)

        if len(parts) == 2 and parts[1] == "STATION":
            return create_transit_type(Planet(parts[0]), subtype=TransitSubtype.STATION)

        if len(parts) == 3 and parts[1] == "INGRESS":
            return create_transit_type(
                Planet(parts[0]), sign=ZodiacSign(parts[2]), subtype=TransitSubtype.INGRESS
            )

        if len(parts) == 3 and parts[1] == "IN":
            return create_transit_type(
                Planet(parts[0]), sign=ZodiacSign(parts[2]), subtype=TransitSubtype.TRANSIT
            )

        if len(parts) == 3:
            return create_transit_type(Planet(parts[0]), Planet(parts[2]), Aspect(parts[1]))
    except ValueError:
        # Unknown planet/aspect/sign names; TransitTypeError is a ValueError too
        return None

    return None
