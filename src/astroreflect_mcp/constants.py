"""Shared constants for astroreflect-mcp.

Centralizes the fixed vocabularies of the transit engine (planets, aspects,
zodiac signs, transit subtypes and timings) so they are defined once and
imported wherever needed.
"""

from enum import Enum

import swisseph as swe


class Planet(str, Enum):
    """The ten bodies the engine tracks, in calculation order."""

    SUN = "SUN"
    MOON = "MOON"
    MERCURY = "MERCURY"
    VENUS = "VENUS"
    MARS = "MARS"
    JUPITER = "JUPITER"
    SATURN = "SATURN"
    URANUS = "URANUS"
    NEPTUNE = "NEPTUNE"
    PLUTO = "PLUTO"

    @property
    def display_name(self) -> str:
        """Title-case name for reports, e.g. 'Mercury'."""
        return self.value.title()

    @property
    def swe_id(self) -> int:
        """pysweph body constant for this planet."""
        return PLANET_IDS[self]

    @classmethod
    def parse(cls, name: str) -> "Planet":
        """Accept 'Sun', 'SUN' or 'sun'.

        Raises:
            ValueError: If the name is not one of the ten planets.
        """
        try:
            return cls(name.strip().upper())
        except (ValueError, AttributeError):
            raise ValueError(f"Unknown planet: {name!r}")


class Aspect(str, Enum):
    """Major aspects and their target angles."""

    CONJUNCTION = "Conjunction"
    SEXTILE = "Sextile"
    SQUARE = "Square"
    TRINE = "Trine"
    OPPOSITION = "Opposition"

    @property
    def angle(self) -> float:
        return ASPECT_ANGLES[self]

    @classmethod
    def parse(cls, name: str) -> "Aspect":
        try:
            return cls(name.strip().title())
        except (ValueError, AttributeError):
            raise ValueError(f"Unknown aspect: {name!r}")


class ZodiacSign(str, Enum):
    """Twelve 30° longitude bands, index 0 = Aries."""

    ARIES = "Aries"
    TAURUS = "Taurus"
    GEMINI = "Gemini"
    CANCER = "Cancer"
    LEO = "Leo"
    VIRGO = "Virgo"
    LIBRA = "Libra"
    SCORPIO = "Scorpio"
    SAGITTARIUS = "Sagittarius"
    CAPRICORN = "Capricorn"
    AQUARIUS = "Aquarius"
    PISCES = "Pisces"

    @property
    def start(self) -> float:
        return SIGN_INFO[self]["start"]

    @property
    def end(self) -> float:
        return SIGN_INFO[self]["end"]

    @property
    def ruler(self) -> Planet:
        return SIGN_INFO[self]["ruler"]

    @property
    def element(self) -> str:
        return SIGN_INFO[self]["element"]

    @classmethod
    def parse(cls, name: str) -> "ZodiacSign":
        try:
            return cls(name.strip().title())
        except (ValueError, AttributeError):
            raise ValueError(f"Unknown zodiac sign: {name!r}")


class TransitSubtype(str, Enum):
    STANDARD = "Standard"
    RETROGRADE = "Retrograde"
    DIRECT = "Direct"
    STATION = "Station"
    INGRESS = "Ingress"
    TRANSIT = "Transit"


class TransitTiming(str, Enum):
    ACTIVE = "Active"            # currently in effect
    APPLYING = "Applying"        # building toward exactitude
    SEPARATING = "Separating"    # moving away from exactitude
    UPCOMING = "Upcoming"        # window not yet open


PLANET_IDS: dict[Planet, int] = {
    Planet.SUN:     swe.SUN,
    Planet.MOON:    swe.MOON,
    Planet.MERCURY: swe.MERCURY,
    Planet.VENUS:   swe.VENUS,
    Planet.MARS:    swe.MARS,
    Planet.JUPITER: swe.JUPITER,
    Planet.SATURN:  swe.SATURN,
    Planet.URANUS:  swe.URANUS,
    Planet.NEPTUNE: swe.NEPTUNE,
    Planet.PLUTO:   swe.PLUTO,
}

ASPECT_ANGLES: dict[Aspect, float] = {
    Aspect.CONJUNCTION: 0.0,
    Aspect.SEXTILE:     60.0,
    Aspect.SQUARE:      90.0,
    Aspect.TRINE:       120.0,
    Aspect.OPPOSITION:  180.0,
}

# Planet categories, tested in this priority order when picking an orb.
LUMINARIES = frozenset({Planet.SUN, Planet.MOON})
PERSONAL_PLANETS = frozenset({Planet.MERCURY, Planet.VENUS, Planet.MARS})
SOCIAL_PLANETS = frozenset({Planet.JUPITER, Planet.SATURN})
OUTER_PLANETS = frozenset({Planet.URANUS, Planet.NEPTUNE, Planet.PLUTO})

# Bodies whose aspects get the long (5-day) window around the exact moment.
SLOW_PLANETS = SOCIAL_PLANETS | OUTER_PLANETS

# The Sun and Moon never station.
RETROGRADE_PLANETS: list[Planet] = [
    p for p in Planet if p not in LUMINARIES
]

SIGN_INFO: dict[ZodiacSign, dict] = {
    ZodiacSign.ARIES:       {"ruler": Planet.MARS,    "element": "Fire",  "start": 0,   "end": 30},
    ZodiacSign.TAURUS:      {"ruler": Planet.VENUS,   "element": "Earth", "start": 30,  "end": 60},
    ZodiacSign.GEMINI:      {"ruler": Planet.MERCURY, "element": "Air",   "start": 60,  "end": 90},
    ZodiacSign.CANCER:      {"ruler": Planet.MOON,    "element": "Water", "start": 90,  "end": 120},
    ZodiacSign.LEO:         {"ruler": Planet.SUN,     "element": "Fire",  "start": 120, "end": 150},
    ZodiacSign.VIRGO:       {"ruler": Planet.MERCURY, "element": "Earth", "start": 150, "end": 180},
    ZodiacSign.LIBRA:       {"ruler": Planet.VENUS,   "element": "Air",   "start": 180, "end": 210},
    ZodiacSign.SCORPIO:     {"ruler": Planet.PLUTO,   "element": "Water", "start": 210, "end": 240},
    ZodiacSign.SAGITTARIUS: {"ruler": Planet.JUPITER, "element": "Fire",  "start": 240, "end": 270},
    ZodiacSign.CAPRICORN:   {"ruler": Planet.SATURN,  "element": "Earth", "start": 270, "end": 300},
    ZodiacSign.AQUARIUS:    {"ruler": Planet.URANUS,  "element": "Air",   "start": 300, "end": 330},
    ZodiacSign.PISCES:      {"ruler": Planet.NEPTUNE, "element": "Water", "start": 330, "end": 360},
}

# Average time (days) a planet spends in one sign.
SIGN_DWELL_DAYS: dict[Planet, float] = {
    Planet.SUN:     30,
    Planet.MOON:    2.5,
    Planet.MERCURY: 25,
    Planet.VENUS:   28,
    Planet.MARS:    60,
    Planet.JUPITER: 365,
    Planet.SATURN:  365,
    Planet.URANUS:  7 * 365,
    Planet.NEPTUNE: 7 * 365,
    Planet.PLUTO:   7 * 365,
}

# Half of a typical retrograde run (days), used to span a retrograde period.
RETROGRADE_HALF_CYCLE_DAYS: dict[Planet, float] = {
    Planet.MERCURY: 21,
    Planet.VENUS:   60,
    Planet.MARS:    60,
    Planet.JUPITER: 120,
    Planet.SATURN:  120,
    Planet.URANUS:  120,
    Planet.NEPTUNE: 120,
    Planet.PLUTO:   120,
}

# Sort priority of each timing phase; unclassified transits sort last.
TIMING_PRIORITY: dict[TransitTiming, int] = {
    TransitTiming.ACTIVE:     0,
    TransitTiming.APPLYING:   1,
    TransitTiming.SEPARATING: 2,
    TransitTiming.UPCOMING:   3,
}
UNCLASSIFIED_PRIORITY = 4
