"""PlanetPosition - one raw sample from the position oracle.

Ephemeral: produced per oracle call and never stored.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PlanetPosition:
    """Ecliptic longitude (degrees, 0-360) and longitudinal speed (degrees/day)."""

    longitude: float
    speed: float

    def __post_init__(self):
        object.__setattr__(self, "longitude", self.longitude % 360.0)

    @property
    def is_retrograde(self) -> bool:
        """Retrograde motion is encoded as negative longitudinal speed."""
        return self.speed < 0
