"""Unit tests for longitude normalisation, separation and sign metadata."""

import math

import pytest

from astroreflect_mcp.constants import Planet, ZodiacSign
from astroreflect_mcp.utils.position_utils import (
    SignDeterminationError,
    angular_separation,
    decimal_to_dms,
    normalize_longitude,
    sign_for_longitude,
    sign_info,
)


class TestNormalize:

    @pytest.mark.parametrize("raw,expected", [
        (0.0, 0.0),
        (360.0, 0.0),
        (-5.0, 355.0),
        (725.0, 5.0),
        (-1e-15, 0.0),
    ])
    def test_into_range(self, raw, expected):
        assert normalize_longitude(raw) == pytest.approx(expected)
        assert 0.0 <= normalize_longitude(raw) < 360.0


class TestAngularSeparation:

    def test_wraps_at_180(self):
        assert angular_separation(355.0, 5.0) == pytest.approx(10.0)
        assert angular_separation(10.0, 200.0) == pytest.approx(170.0)

    def test_symmetric(self):
        assert angular_separation(33.0, 301.0) == angular_separation(301.0, 33.0)


class TestSignForLongitude:
    """sign_for_longitude() converts absolute 0–360° to a sign."""

    CASES = [
        (0.0,    ZodiacSign.ARIES),
        (29.999, ZodiacSign.ARIES),
        (30.0,   ZodiacSign.TAURUS),
        (180.0,  ZodiacSign.LIBRA),
        (359.99, ZodiacSign.PISCES),
        (360.0,  ZodiacSign.ARIES),
        (-15.0,  ZodiacSign.PISCES),
    ]

    @pytest.mark.parametrize("longitude,expected", CASES)
    def test_sign(self, longitude, expected):
        assert sign_for_longitude(longitude) == expected

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite(self, bad):
        with pytest.raises(SignDeterminationError):
            sign_for_longitude(bad)


class TestSignInfo:

    def test_metadata(self):
        info = sign_info(134.66)
        assert info["sign"] == ZodiacSign.LEO
        assert info["ruler"] == Planet.SUN
        assert info["element"] == "Fire"
        assert info["degree"] == pytest.approx(14.66)
        assert info["percent_in_sign"] == pytest.approx(48.866, abs=0.01)
        assert info["formatted"] == "14°39'"
        assert info["absolute_position"] == pytest.approx(134.66)

    def test_dms(self):
        degrees, minutes, seconds = decimal_to_dms(14.66)
        assert (degrees, minutes) == (14, 39)
        assert seconds == pytest.approx(36.0)
