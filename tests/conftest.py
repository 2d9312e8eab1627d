"""Pytest fixtures for transit engine tests.

Provides a deterministic stand-in for the ephemeris:
- FakeOracle: positions from per-planet motion functions of elapsed days
- fixed_clock / NOW: a pinned "now" for every sweep
- make_engine: TransitEngine factory wired to a FakeOracle
"""

from datetime import datetime, timezone

import pytest

from astroreflect_mcp.constants import Planet
from astroreflect_mcp.models import PlanetPosition
from astroreflect_mcp.utils.ephemeris import EphemerisError
from astroreflect_mcp.utils.transit_engine import TransitEngine

EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)
NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def days_since_epoch(moment: datetime) -> float:
    return (moment - EPOCH).total_seconds() / 86400.0


def linear(base: float, rate: float):
    """Motion at a constant rate (degrees/day) from `base` at EPOCH."""
    def motion(days):
        return base + rate * days, rate
    return motion


def static(longitude: float, speed: float = 0.5):
    def motion(days):
        return longitude, speed
    return motion


class FakeOracle:
    """Position oracle driven by per-planet motion functions.

    Planets without a motion sit in their own sign (index * 30 + 7 degrees),
    moving direct. Planets listed in `failing` raise EphemerisError.
    """

    def __init__(self, motions=None, failing=()):
        self.motions = motions or {}
        self.failing = set(failing)
        self.calls = 0

    def get_position(self, planet: Planet, moment: datetime) -> PlanetPosition:
        self.calls += 1
        if planet in self.failing:
            raise EphemerisError(f"no data for {planet.display_name}")

        motion = self.motions.get(planet)
        if motion is None:
            motion = static(list(Planet).index(planet) * 30 + 7)
        longitude, speed = motion(days_since_epoch(moment))
        return PlanetPosition(longitude=longitude, speed=speed)


class BrokenOracle:
    """Fails on every call."""

    def __init__(self):
        self.calls = 0

    def get_position(self, planet, moment):
        self.calls += 1
        raise EphemerisError("ephemeris unavailable")


def fixed_clock():
    return NOW


@pytest.fixture
def make_engine():
    """Build a TransitEngine on a FakeOracle with the clock pinned to NOW."""
    def factory(motions=None, failing=(), **kwargs):
        oracle = FakeOracle(motions, failing)
        return TransitEngine(oracle, clock=fixed_clock, **kwargs)
    return factory


@pytest.fixture
def broken_engine():
    return TransitEngine(BrokenOracle(), clock=fixed_clock)
