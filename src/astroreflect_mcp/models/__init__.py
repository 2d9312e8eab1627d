"""Data models for astroreflect-mcp.

This package contains the value objects the transit engine produces:
- PlanetPosition: one longitude/speed sample from the position oracle
- Transit: a time-bounded event (aspect, station, ingress, sign transit)
- TransitType: the canonical kind of a transit, keyed by its type id

Example usage:
    from astroreflect_mcp.models import Transit
    from astroreflect_mcp.utils.transit_engine import TransitEngine

    transits: list[Transit] = engine.get_current_transits()
    for t in transits:
        print(t.transit_type_id, t.timing, t.intensity)
"""

from .planet_position import PlanetPosition
from .transit import Transit
from .transit_type import TransitType

__all__ = [
    "PlanetPosition",
    "Transit",
    "TransitType",
]
