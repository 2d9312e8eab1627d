"""Retrograde station search.

A station is the moment a body's apparent motion reverses. The search samples
a coarse grid and keeps the moment whose speed is closest to zero; the sign of
the speed at that sampled moment tells which way the body is turning.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..constants import Planet
from ..models import PlanetPosition
from .time_utils import sample_grid

PositionFn = Callable[[Planet, datetime], PlanetPosition]


@dataclass(frozen=True)
class Station:
    planet: Planet
    moment: datetime
    speed: float

    @property
    def turning_retrograde(self) -> bool:
        """Negative speed at the sampled minimum means the body is going retrograde."""
        return self.speed < 0


def find_station(
    position: PositionFn,
    planet: Planet,
    start: datetime,
    end: datetime,
    steps: int = 20,
) -> Optional[Station]:
    """Sampled moment in [start, end] with the smallest |speed|.

    Returns:
        Station, or None when the range is empty.
    """
    if end <= start:
        return None

    best: Optional[Station] = None
    for moment in sample_grid(start, end, steps):
        speed = position(planet, moment).speed
        if best is None or abs(speed) < abs(best.speed):
            best = Station(planet=planet, moment=moment, speed=speed)
    return best
