"""Transit assembly: sweeps a date range and produces classified transits.

One sweep runs three passes over the requested planets:

    1. aspects      every unordered pair x every aspect
    2. retrograde   stations inside the range, then the current retrograde state
    3. signs        ingresses inside the range, then the sign each planet is in now

Every pass writes into a single dict keyed by transit type id, so a kind of
event appears at most once per sweep and the first writer wins. A failure on
one combination is logged and skipped; only a sweep in which every oracle call
failed is reported as an error.

Usage:
    engine = TransitEngine(EphemerisEngine())
    transits = engine.find_transits_in_range(start, end, [Planet.SUN, Planet.MARS])
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from ..constants import (
    RETROGRADE_HALF_CYCLE_DAYS,
    RETROGRADE_PLANETS,
    SLOW_PLANETS,
    Aspect,
    Planet,
    TransitSubtype,
    TransitTiming,
)
from ..models import PlanetPosition, Transit
from .aspects import find_exact_moment, matches
from .descriptions import describe_aspect, describe_direct_station, describe_retrograde
from .ephemeris import EphemerisError, PositionOracle
from .ingress import current_sign_transit, ingress_transit, scan_sign_ingresses, sign_transit_after_ingress
from .sample_transits import fallback_transits, illustrative_transits
from .stations import Station, find_station
from .time_utils import day_window, end_of_day, ensure_utc, start_of_day, utc_now
from .transit_classifier import classify, sort_transits
from .transit_types import transit_type_id

logger = logging.getLogger(__name__)

# Window half-widths (days) around an exact aspect
MOON_ASPECT_DAYS = 0.5
SLOW_ASPECT_DAYS = 5
DEFAULT_ASPECT_DAYS = 2

MIN_REAL_SAMPLES = 3
MAX_SAMPLES = 5


class _PositionCache:
    """Per-sweep memo of oracle samples, keyed by planet and whole second.

    Failures are counted but never cached.
    """

    def __init__(self, oracle: PositionOracle):
        self._oracle = oracle
        self._samples: dict[tuple[Planet, int], PlanetPosition] = {}
        self.successes = 0
        self.failures = 0

    def __call__(self, planet: Planet, moment: datetime) -> PlanetPosition:
        key = (planet, round(moment.timestamp()))
        cached = self._samples.get(key)
        if cached is not None:
            return cached

        try:
            position = self._oracle.get_position(planet, moment)
        except Exception:
            self.failures += 1
            raise

        self.successes += 1
        self._samples[key] = position
        return position


def aspect_window_days(planet_a: Planet, planet_b: Planet) -> float:
    """Half-width of an aspect window: short for the Moon, long for slow planets."""
    pair = {planet_a, planet_b}
    if Planet.MOON in pair:
        return MOON_ASPECT_DAYS
    if pair & SLOW_PLANETS:
        return SLOW_ASPECT_DAYS
    return DEFAULT_ASPECT_DAYS


class TransitEngine:
    """Finds, deduplicates, classifies and orders transits.

    Args:
        oracle: Position source, usually an EphemerisEngine.
        clock: Callable returning the current UTC moment. Read once per sweep.
        steps: Grid resolution for exact-moment and station searches.
        active_window_days: Half-width of the search for an aspect active now.
    """

    def __init__(
        self,
        oracle: PositionOracle,
        clock: Optional[Callable[[], datetime]] = None,
        steps: int = 20,
        active_window_days: float = 7,
        sample_day_range: float = 5,
    ):
        self.oracle = oracle
        self.clock = clock or utc_now
        self.steps = steps
        self.active_window_days = active_window_days
        self.sample_day_range = sample_day_range

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def find_transits_in_range(
        self,
        start: datetime,
        end: datetime,
        planets: Optional[Iterable[Planet]] = None,
    ) -> list[Transit]:
        """All transits touching [start, end] for the given planets.

        Args:
            start: Range start (naive values are taken as UTC).
            end: Range end. An empty or reversed range returns [].
            planets: Planets to consider; None means all ten.

        Returns:
            Transits sorted by timing phase, then by intensity.

        Raises:
            EphemerisError: If every position request in the sweep failed.
        """
        start, end = ensure_utc(start), ensure_utc(end)
        if end <= start:
            return []

        if planets is None:
            planet_list = list(Planet)
        else:
            planet_list = list(dict.fromkeys(planets))
        if not planet_list:
            return []

        now = ensure_utc(self.clock())
        position = _PositionCache(self.oracle)
        found: dict[str, Transit] = {}

        self._aspect_pass(found, position, now, start, end, planet_list)
        self._retrograde_pass(found, position, now, start, end, planet_list)
        self._sign_pass(found, position, now, start, end, planet_list)

        if position.failures and not position.successes:
            raise EphemerisError(
                f"All {position.failures} position calculations failed "
                f"for {start.isoformat()} to {end.isoformat()}"
            )

        for transit in found.values():
            classify(transit, now)
        result = sort_transits(found.values())

        logger.debug(
            "Sweep %s to %s: %d transits from %d samples (%d failed)",
            start.isoformat(), end.isoformat(), len(result),
            position.successes, position.failures,
        )
        return result

    def get_current_transits(
        self,
        center: Optional[datetime] = None,
        day_range: float = 3,
    ) -> list[Transit]:
        """Transits within `day_range` days either side of `center` (default now)."""
        center = ensure_utc(center) if center is not None else ensure_utc(self.clock())
        span = timedelta(days=day_range)
        return self.find_transits_in_range(center - span, center + span)

    def get_sample_transits(self, date: Optional[datetime] = None) -> list[Transit]:
        """A short, never-empty list of transits around `date` for previews.

        Three or more real transits are returned as they are. Fewer are padded
        with illustrative entries up to five. If the real calculation fails
        outright, a fixed fallback catalog is returned instead.
        """
        date = ensure_utc(date) if date is not None else ensure_utc(self.clock())

        try:
            real = self.get_current_transits(date, self.sample_day_range)
        except Exception as exc:
            logger.error("Error calculating transits for samples, using fallback: %s", exc)
            return sort_transits(classify(t, date) for t in fallback_transits(date))

        if len(real) >= MIN_REAL_SAMPLES:
            return real

        existing = {t.transit_type_id for t in real}
        padding = [
            classify(t, date)
            for t in illustrative_transits(date)
            if t.transit_type_id not in existing
        ]
        return (real + sort_transits(padding))[:MAX_SAMPLES]

    # ------------------------------------------------------------------
    # Aspects
    # ------------------------------------------------------------------

    def _aspect_pass(self, found, position, now, start, end, planets) -> None:
        for i, planet_a in enumerate(planets):
            for planet_b in planets[i + 1:]:
                for aspect in Aspect:
                    try:
                        self._check_aspect(found, position, now, start, end,
                                           planet_a, planet_b, aspect)
                    except Exception as exc:
                        logger.warning(
                            "Skipping %s %s %s: %s",
                            planet_a.display_name, aspect.value, planet_b.display_name, exc,
                        )

    def _check_aspect(self, found, position, now, start, end,
                      planet_a: Planet, planet_b: Planet, aspect: Aspect) -> None:
        type_id = transit_type_id(planet_a, planet_b, aspect)
        if type_id in found:
            return

        # Active now: search around the present for the exact moment
        if matches(position(planet_a, now).longitude, position(planet_b, now).longitude,
                   aspect, planet_a, planet_b):
            window = timedelta(days=self.active_window_days)
            exact = find_exact_moment(position, planet_a, planet_b, aspect,
                                      now - window, now + window, self.steps)
            found[type_id] = self._aspect_transit(planet_a, planet_b, aspect, exact or now)
            return

        # Entered or left orb during the range
        at_start = matches(position(planet_a, start).longitude,
                           position(planet_b, start).longitude,
                           aspect, planet_a, planet_b)
        at_end = matches(position(planet_a, end).longitude,
                         position(planet_b, end).longitude,
                         aspect, planet_a, planet_b)
        if at_start == at_end:
            return

        exact = find_exact_moment(position, planet_a, planet_b, aspect, start, end, self.steps)
        if exact is not None:
            found[type_id] = self._aspect_transit(planet_a, planet_b, aspect, exact)

    def _aspect_transit(self, planet_a: Planet, planet_b: Planet,
                        aspect: Aspect, exact: datetime) -> Transit:
        window_start, window_end = day_window(exact, aspect_window_days(planet_a, planet_b))
        return Transit(
            transit_type_id=transit_type_id(planet_a, planet_b, aspect),
            planet_a=planet_a,
            planet_b=planet_b,
            aspect=aspect,
            subtype=TransitSubtype.STANDARD,
            exact_date=exact,
            start_date=window_start,
            end_date=window_end,
            description=describe_aspect(planet_a, aspect, planet_b),
        )

    # ------------------------------------------------------------------
    # Retrograde motion
    # ------------------------------------------------------------------

    def _retrograde_pass(self, found, position, now, start, end, planets) -> None:
        for planet in planets:
            if planet not in RETROGRADE_PLANETS:
                continue
            try:
                self._check_retrograde(found, position, now, start, end, planet)
            except Exception as exc:
                logger.warning("Skipping retrograde check for %s: %s", planet.display_name, exc)

    def _check_retrograde(self, found, position, now, start, end, planet: Planet) -> None:
        if position(planet, start).is_retrograde != position(planet, end).is_retrograde:
            station = find_station(position, planet, start, end, self.steps)
            if station is not None:
                transit = self._station_transit(station)
                found.setdefault(transit.transit_type_id, transit)

        if not position(planet, now).is_retrograde:
            return

        retrograde_id = transit_type_id(planet, subtype=TransitSubtype.RETROGRADE)
        if retrograde_id not in found:
            found[retrograde_id] = self._current_retrograde_transit(planet, now)

        # A direct station already behind us contradicts the retrograde state now
        station_id = transit_type_id(planet, subtype=TransitSubtype.STATION)
        stale = found.get(station_id)
        if stale is not None and stale.subtype == TransitSubtype.DIRECT and stale.exact_date <= now:
            logger.debug("Dropping stale direct station for retrograde %s", planet.display_name)
            del found[station_id]

    def _station_transit(self, station: Station) -> Transit:
        planet = station.planet
        run = timedelta(days=2 * RETROGRADE_HALF_CYCLE_DAYS[planet])

        if station.turning_retrograde:
            return Transit(
                transit_type_id=transit_type_id(planet, subtype=TransitSubtype.RETROGRADE),
                planet_a=planet,
                subtype=TransitSubtype.RETROGRADE,
                exact_date=station.moment,
                start_date=start_of_day(station.moment),
                end_date=end_of_day(station.moment + run),
                description=describe_retrograde(planet),
            )

        return Transit(
            transit_type_id=transit_type_id(planet, subtype=TransitSubtype.STATION),
            planet_a=planet,
            subtype=TransitSubtype.DIRECT,
            exact_date=station.moment,
            start_date=start_of_day(station.moment - run),
            end_date=end_of_day(station.moment),
            description=describe_direct_station(planet),
        )

    def _current_retrograde_transit(self, planet: Planet, now: datetime) -> Transit:
        half_cycle = timedelta(days=RETROGRADE_HALF_CYCLE_DAYS[planet])
        return Transit(
            transit_type_id=transit_type_id(planet, subtype=TransitSubtype.RETROGRADE),
            planet_a=planet,
            subtype=TransitSubtype.RETROGRADE,
            exact_date=now,
            start_date=start_of_day(now - half_cycle),
            end_date=end_of_day(now + half_cycle),
            description=describe_retrograde(planet),
            timing=TransitTiming.ACTIVE,
        )

    # ------------------------------------------------------------------
    # Signs
    # ------------------------------------------------------------------

    def _sign_pass(self, found, position, now, start, end, planets) -> None:
        for planet in planets:
            try:
                ingresses = scan_sign_ingresses(position, planet, start, end)
            except Exception as exc:
                logger.warning("Skipping ingress scan for %s: %s", planet.display_name, exc)
                ingresses = []

            for ingress in ingresses:
                try:
                    for transit in (ingress_transit(ingress),
                                    sign_transit_after_ingress(ingress, end)):
                        found.setdefault(transit.transit_type_id, transit)
                except Exception as exc:
                    logger.warning("Skipping %s ingress into %s: %s",
                                   planet.display_name, ingress.to_sign.value, exc)

            try:
                snapshot = current_sign_transit(planet, position(planet, now).longitude, now)
                found.setdefault(snapshot.transit_type_id, snapshot)
            except Exception as exc:
                logger.warning("Skipping current sign for %s: %s", planet.display_name, exc)
