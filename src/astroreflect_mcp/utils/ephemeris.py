"""Ephemeris engine using pysweph (Swiss Ephemeris Python bindings).

This is the position oracle the transit engine samples: given a planet and
a moment it returns the ecliptic longitude and longitudinal speed.

Every failure surfaces as EphemerisError, never as a zero position, so the
engine's per-combination catch-and-skip policy can tell a bad sample from a
real one.

Precision:
    - Moshier (default, no files needed): ~1 arcminute
    - Swiss Ephemeris files (.se1):       ~0.001 arcsecond
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol

import swisseph as swe

from ..constants import Planet
from ..models import PlanetPosition
from .position_utils import SignDeterminationError, sign_info
from .time_utils import ensure_utc


class EphemerisError(Exception):
    """Raised when an ephemeris calculation fails."""
    pass


class PositionOracle(Protocol):
    """Anything that can place a planet at a moment."""

    def get_position(self, planet: Planet, moment: datetime) -> PlanetPosition:
        ...


class EphemerisEngine:
    """Calculates planetary longitudes and speeds using pysweph.

    Usage:
        engine = EphemerisEngine()                        # Moshier (no files needed)
        engine = EphemerisEngine(ephe_path="/path/ephe")  # Swiss Ephemeris files

        pos = engine.get_position(Planet.MARS, datetime.now(timezone.utc))
    """

    CALC_FLAGS = swe.FLG_SWIEPH | swe.FLG_SPEED

    def __init__(self, ephe_path: Optional[str] = None):
        """Initialize the engine and configure the ephemeris source.

        Args:
            ephe_path: Path to directory containing .se1 ephemeris files.
                       Pass None (default) to use the built-in Moshier ephemeris,
                       which requires no external files.
        """
        self.ephe_path = ephe_path
        if ephe_path is not None:
            swe.set_ephe_path(ephe_path)
        else:
            # Explicitly activate Moshier so behavior is predictable
            # even if the caller later changes the global path.
            swe.set_ephe_path(None)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def get_position(self, planet: Planet, moment: datetime) -> PlanetPosition:
        """Longitude (0-360°) and speed (°/day) of a planet at a UTC moment.

        Raises:
            EphemerisError: If pysweph cannot calculate the position.
        """
        jd = self._to_jd(ensure_utc(moment))
        try:
            # pysweph returns (xx, ret_flags); xx = lon, lat, dist, speed_lon, ...
            raw = swe.calc_ut(jd, planet.swe_id, self.CALC_FLAGS)
            xx = raw[0]
            longitude, speed = float(xx[0]), float(xx[3])
        except Exception as exc:
            raise EphemerisError(
                f"Failed to calculate {planet.display_name}: {exc}"
            ) from exc

        return PlanetPosition(longitude=longitude, speed=speed)

    def get_sign_info(self, longitude: float) -> dict[str, Any]:
        """Sign metadata for a longitude (see position_utils.sign_info).

        Raises:
            SignDeterminationError: If the longitude is not finite.
        """
        return sign_info(longitude)

    def describe_position(self, planet: Planet, moment: datetime) -> dict[str, Any]:
        """Position plus sign metadata and retrograde status for display.

        Raises:
            EphemerisError: If the position cannot be calculated.
        """
        position = self.get_position(planet, moment)
        try:
            info = self.get_sign_info(position.longitude)
        except SignDeterminationError as exc:
            raise EphemerisError(str(exc)) from exc

        return {
            "planet": planet,
            "moment": ensure_utc(moment),
            "longitude": position.longitude,
            "speed": position.speed,
            "is_retrograde": self._is_retrograde(position.speed),
            **info,
        }

    def get_mode(self) -> str:
        """Return the active ephemeris mode: 'moshier' or 'sweph'."""
        return "moshier" if self.ephe_path is None else "sweph"

    # ------------------------------------------------------------------
    # Conversion helpers
    # ------------------------------------------------------------------

    def _to_jd(self, moment: datetime) -> float:
        """Convert an aware UTC datetime to a Julian Day number (UT)."""
        hour = (
            moment.hour
            + moment.minute / 60.0
            + (moment.second + moment.microsecond / 1e6) / 3600.0
        )
        return swe.julday(moment.year, moment.month, moment.day, hour)

    def _is_retrograde(self, speed: float) -> bool:
        """Return True if the planet is retrograde (speed < 0)."""
        return speed < 0
