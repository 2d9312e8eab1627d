"""Timing phase and intensity of a transit relative to "now".

    UPCOMING    now < start
    APPLYING    start <= now < exact
    SEPARATING  now >= exact (also after the window has closed)

Intensity peaks at 100 on the exact moment and falls linearly to the window
edges; it is 0 whenever now is outside the window.
"""

from datetime import datetime
from typing import Iterable

from ..constants import TIMING_PRIORITY, UNCLASSIFIED_PRIORITY, TransitTiming
from ..models import Transit


def get_timing(now: datetime, exact: datetime, start: datetime, end: datetime) -> TransitTiming:
    if now < start:
        return TransitTiming.UPCOMING
    if now < exact:
        return TransitTiming.APPLYING
    # TODO: add an ENDED timing for now > end, SEPARATING covers it for now
    return TransitTiming.SEPARATING


def get_intensity(now: datetime, exact: datetime, start: datetime, end: datetime) -> float:
    """0-100 strength of a transit at `now`."""
    if now < start or now > end:
        return 0.0

    window = (end - start).total_seconds()
    if window == 0:
        return 100.0

    distance = abs((now - exact).total_seconds())
    intensity = 100.0 * (1.0 - distance / window)
    return max(0.0, min(100.0, intensity))


def classify(transit: Transit, now: datetime) -> Transit:
    """Fill in timing (unless already set) and intensity in place."""
    if transit.timing is None:
        transit.timing = get_timing(
            now, transit.exact_date, transit.start_date, transit.end_date
        )
    transit.intensity = get_intensity(
        now, transit.exact_date, transit.start_date, transit.end_date
    )
    return transit


def timing_priority(transit: Transit) -> int:
    if transit.timing is None:
        return UNCLASSIFIED_PRIORITY
    return TIMING_PRIORITY[transit.timing]


def sort_transits(transits: Iterable[Transit]) -> list[Transit]:
    """Order by timing phase (active first), then by intensity, strongest first."""
    return sorted(
        transits,
        key=lambda t: (timing_priority(t), -(t.intensity or 0.0)),
    )
