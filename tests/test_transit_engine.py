"""Tests for the transit assembly sweep.

Scenarios use FakeOracle motions chosen so the coarse 20-step grids land on
known samples: ranges are 30 days (1.5-day grid) and the active-now search
spans 14 days (0.7-day grid) centred on NOW.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from astroreflect_mcp.constants import (
    TIMING_PRIORITY,
    UNCLASSIFIED_PRIORITY,
    Planet,
    TransitSubtype,
    TransitTiming,
)
from astroreflect_mcp.utils.ephemeris import EphemerisError
from astroreflect_mcp.utils.transit_engine import TransitEngine, _PositionCache, aspect_window_days

from conftest import NOW, BrokenOracle, FakeOracle, linear, static

JAN_1 = datetime(2025, 1, 1, tzinfo=timezone.utc)
JAN_31 = datetime(2025, 1, 31, tzinfo=timezone.utc)


def by_id(transits):
    return {t.transit_type_id: t for t in transits}


def priority(transit):
    if transit.timing is None:
        return UNCLASSIFIED_PRIORITY
    return TIMING_PRIORITY[transit.timing]


# ---------------------------------------------------------------------------
# Ranges and planet selection
# ---------------------------------------------------------------------------

class TestRanges:
    """Degenerate inputs return [] without touching the oracle."""

    def test_empty_range(self, make_engine):
        engine = make_engine()
        assert engine.find_transits_in_range(NOW, NOW) == []
        assert engine.oracle.calls == 0

    def test_reversed_range(self, make_engine):
        engine = make_engine()
        assert engine.find_transits_in_range(JAN_31, JAN_1) == []
        assert engine.oracle.calls == 0

    def test_empty_planet_list(self, make_engine):
        engine = make_engine()
        assert engine.find_transits_in_range(JAN_1, JAN_31, []) == []

    def test_naive_datetimes_are_utc(self, make_engine):
        motions = {Planet.SUN: linear(62, 1), Planet.MARS: static(0)}
        engine = make_engine(motions)

        aware = engine.find_transits_in_range(JAN_1, JAN_31, [Planet.SUN, Planet.MARS])
        naive = engine.find_transits_in_range(
            datetime(2025, 1, 1), datetime(2025, 1, 31), [Planet.SUN, Planet.MARS]
        )
        assert set(by_id(aware)) == set(by_id(naive))

    def test_planet_filter(self, make_engine):
        engine = make_engine()
        transits = engine.find_transits_in_range(JAN_1, JAN_31, [Planet.VENUS])
        assert transits
        assert all(t.planet_a == Planet.VENUS and t.planet_b is None for t in transits)


# ---------------------------------------------------------------------------
# Aspects
# ---------------------------------------------------------------------------

class TestAspectPass:
    """Aspects found by state change across the range and by holding now."""

    def test_aspect_entering_orb_during_range(self, make_engine):
        """Sun 62°→92° against Mars at 0°: square forms near the end of January."""
        engine = make_engine({Planet.SUN: linear(62, 1), Planet.MARS: static(0)})
        transits = by_id(engine.find_transits_in_range(JAN_1, JAN_31, [Planet.SUN, Planet.MARS]))

        square = transits["MARS_Square_SUN"]
        assert square.exact_date == datetime(2025, 1, 29, 12, tzinfo=timezone.utc)
        assert square.start_date == datetime(2025, 1, 27, tzinfo=timezone.utc)
        assert square.end_date.date() == datetime(2025, 1, 31).date()
        assert square.subtype == TransitSubtype.STANDARD
        assert square.timing == TransitTiming.UPCOMING
        assert square.intensity == 0.0

    def test_unresolvable_peak_is_skipped(self, make_engine):
        """The sextile leaves orb but its best sampled residual is 2°, so no record."""
        engine = make_engine({Planet.SUN: linear(62, 1), Planet.MARS: static(0)})
        transits = by_id(engine.find_transits_in_range(JAN_1, JAN_31, [Planet.SUN, Planet.MARS]))
        assert "MARS_Sextile_SUN" not in transits

    def test_full_result_for_two_planets(self, make_engine):
        engine = make_engine({Planet.SUN: linear(62, 1), Planet.MARS: static(0)})
        transits = engine.find_transits_in_range(JAN_1, JAN_31, [Planet.SUN, Planet.MARS])

        assert set(by_id(transits)) == {
            "MARS_Square_SUN",
            "SUN_INGRESS_Cancer",
            "SUN_IN_Cancer",
            "SUN_IN_Gemini",
            "MARS_IN_Aries",
        }

    def test_aspect_holding_now(self, make_engine):
        """Exact square at NOW is found by the search around the present."""
        engine = make_engine({Planet.SUN: linear(75.5, 1), Planet.MARS: static(0)})
        transits = by_id(engine.get_current_transits())

        square = transits["MARS_Square_SUN"]
        assert square.exact_date == NOW
        assert square.intensity == 100.0
        assert square.timing == TransitTiming.SEPARATING

    def test_active_aspect_without_resolvable_exact_anchors_at_now(self, make_engine):
        """Fast-moving Moon: within orb now, but no grid sample within 1° of exact."""
        # Moon at 93.5° now, moving 13°/day; 0.7-day grid steps are 9.1° apart
        engine = make_engine({Planet.MOON: linear(93.5 - 13 * 14.5, 13), Planet.MARS: static(0)},
                             active_window_days=7)
        transits = by_id(engine.find_transits_in_range(
            NOW - timedelta(hours=1), NOW + timedelta(hours=1), [Planet.MOON, Planet.MARS]
        ))

        square = transits["MARS_Square_MOON"]
        assert square.exact_date == NOW

    def test_aspect_found_once(self, make_engine):
        """Holding now and changing state across the range yields one record."""
        engine = make_engine({Planet.SUN: linear(75.5, 1), Planet.MARS: static(0)})
        start = datetime(2025, 1, 10, tzinfo=timezone.utc)
        transits = engine.find_transits_in_range(start, JAN_31, [Planet.SUN, Planet.MARS])

        ids = [t.transit_type_id for t in transits]
        assert ids.count("MARS_Square_SUN") == 1

    def test_window_widths(self):
        assert aspect_window_days(Planet.MOON, Planet.SATURN) == 0.5
        assert aspect_window_days(Planet.SUN, Planet.JUPITER) == 5
        assert aspect_window_days(Planet.PLUTO, Planet.MARS) == 5
        assert aspect_window_days(Planet.SUN, Planet.VENUS) == 2


# ---------------------------------------------------------------------------
# Retrograde motion
# ---------------------------------------------------------------------------

def _speed_curve(speed_fn, longitude=195.0):
    def motion(days):
        return longitude, speed_fn(days)
    return motion


class TestRetrogradePass:
    """Stations inside the range and the current retrograde state."""

    def test_station_turning_retrograde(self, make_engine):
        engine = make_engine({Planet.MERCURY: _speed_curve(lambda d: -0.02 * (d - 20.8))})
        transits = by_id(engine.find_transits_in_range(JAN_1, JAN_31, [Planet.MERCURY]))

        retro = transits["MERCURY_RETROGRADE"]
        assert retro.subtype == TransitSubtype.RETROGRADE
        assert retro.exact_date == datetime(2025, 1, 22, tzinfo=timezone.utc)
        assert retro.start_date == retro.exact_date
        assert retro.end_date.date() == (retro.exact_date + timedelta(days=42)).date()
        assert retro.timing == TransitTiming.UPCOMING

    def test_currently_retrograde_is_active(self, make_engine):
        engine = make_engine({Planet.MERCURY: linear(199, -0.5)})
        transits = by_id(engine.find_transits_in_range(JAN_1, JAN_31, [Planet.MERCURY]))

        retro = transits["MERCURY_RETROGRADE"]
        assert retro.timing == TransitTiming.ACTIVE
        assert retro.exact_date == NOW
        assert retro.start_date < NOW < retro.end_date
        assert "MERCURY_STATION" not in transits

    def test_upcoming_direct_station_kept(self, make_engine):
        engine = make_engine({Planet.MERCURY: _speed_curve(lambda d: 0.1 * (d - 20.8))})
        transits = by_id(engine.find_transits_in_range(JAN_1, JAN_31, [Planet.MERCURY]))

        station = transits["MERCURY_STATION"]
        assert station.subtype == TransitSubtype.DIRECT
        assert station.exact_date == datetime(2025, 1, 22, tzinfo=timezone.utc)
        assert station.end_date.date() == station.exact_date.date()
        assert station.timing == TransitTiming.APPLYING
        assert transits["MERCURY_RETROGRADE"].timing == TransitTiming.ACTIVE

    def test_past_direct_station_dropped_while_retrograde(self, make_engine):
        def speed(d):
            if d < 3:
                return -1.0
            if d < 6:
                return 0.001
            if d < 25:
                return -1.0
            return 1.0

        engine = make_engine({Planet.MERCURY: _speed_curve(speed)})
        transits = by_id(engine.find_transits_in_range(JAN_1, JAN_31, [Planet.MERCURY]))

        assert "MERCURY_STATION" not in transits
        assert transits["MERCURY_RETROGRADE"].timing == TransitTiming.ACTIVE

    def test_direct_station_in_last_millisecond_of_day(self, make_engine):
        # 1-day grid keeps the sub-millisecond offset on every sample
        start = datetime(2025, 1, 1, 23, 59, 59, 999500, tzinfo=timezone.utc)
        engine = make_engine({Planet.MERCURY: _speed_curve(lambda d: 0.1 * (d - 20.8))})
        transits = by_id(engine.find_transits_in_range(
            start, start + timedelta(days=20), [Planet.MERCURY]
        ))

        station = transits["MERCURY_STATION"]
        assert station.subtype == TransitSubtype.DIRECT
        assert station.exact_date == start + timedelta(days=20)
        assert station.start_date <= station.exact_date <= station.end_date

    def test_luminaries_never_retrograde(self, make_engine):
        engine = make_engine({Planet.SUN: static(7, -1.0), Planet.MOON: static(100, -1.0)})
        transits = engine.find_transits_in_range(JAN_1, JAN_31, [Planet.SUN, Planet.MOON])
        assert not any(t.subtype == TransitSubtype.RETROGRADE for t in transits)


# ---------------------------------------------------------------------------
# Sign ingress
# ---------------------------------------------------------------------------

class TestSignPass:
    """Ingresses, derived sign transits and the current-sign snapshot."""

    def test_moon_ingresses(self, make_engine):
        engine = make_engine({Planet.MOON: linear(25, 13)})
        end = datetime(2025, 1, 4, tzinfo=timezone.utc)
        transits = by_id(engine.find_transits_in_range(JAN_1, end, [Planet.MOON]))

        ingress = transits["MOON_INGRESS_Taurus"]
        assert ingress.exact_date == datetime(2025, 1, 2, tzinfo=timezone.utc)
        assert ingress.start_date == datetime(2025, 1, 2, tzinfo=timezone.utc)
        assert ingress.end_date == datetime(2025, 1, 2, 23, 59, 59, 999999, tzinfo=timezone.utc)

        # Dwell of 2.5 days is capped at the end of the range
        in_taurus = transits["MOON_IN_Taurus"]
        assert in_taurus.start_date == ingress.exact_date
        assert in_taurus.end_date == end

        assert "MOON_INGRESS_Gemini" in transits

    def test_snapshot_reports_current_sign(self, make_engine):
        engine = make_engine({Planet.MOON: linear(25, 13)})
        end = datetime(2025, 1, 4, tzinfo=timezone.utc)
        transits = by_id(engine.find_transits_in_range(JAN_1, end, [Planet.MOON]))

        # 25 + 13 * 14.5 = 213.5° at NOW
        snapshot = transits["MOON_IN_Scorpio"]
        assert snapshot.timing == TransitTiming.ACTIVE
        assert snapshot.exact_date == NOW
        assert snapshot.start_date == datetime(2025, 1, 14, tzinfo=timezone.utc)
        assert snapshot.end_date.date() == datetime(2025, 1, 16).date()

    def test_snapshot_reported_without_ingress(self, make_engine):
        engine = make_engine({Planet.SATURN: static(345)})
        transits = engine.find_transits_in_range(JAN_1, JAN_31, [Planet.SATURN])
        assert [t.transit_type_id for t in transits] == ["SATURN_IN_Pisces"]

    def test_ingress_record_wins_over_snapshot(self, make_engine):
        engine = make_engine({Planet.MOON: linear(25, 13)})
        start = datetime(2025, 1, 14, tzinfo=timezone.utc)
        end = datetime(2025, 1, 16, tzinfo=timezone.utc)
        transits = engine.find_transits_in_range(start, end, [Planet.MOON])

        scorpio = [t for t in transits if t.transit_type_id == "MOON_IN_Scorpio"]
        assert len(scorpio) == 1
        assert scorpio[0].start_date == end
        assert scorpio[0].timing == TransitTiming.UPCOMING

    def test_ingress_in_last_millisecond_of_day(self, make_engine):
        start = datetime(2025, 1, 1, 23, 59, 59, 999500, tzinfo=timezone.utc)
        engine = make_engine({Planet.MOON: linear(25, 13)})
        transits = by_id(engine.find_transits_in_range(
            start, start + timedelta(days=3), [Planet.MOON]
        ))

        ingress = transits["MOON_INGRESS_Gemini"]
        assert ingress.exact_date == start + timedelta(days=2)
        assert ingress.start_date <= ingress.exact_date <= ingress.end_date
        assert "MOON_IN_Gemini" in transits

    def test_bad_ingress_record_skips_only_that_ingress(self, make_engine, monkeypatch, caplog):
        import astroreflect_mcp.utils.transit_engine as engine_module

        original = engine_module.ingress_transit

        def ingress_transit(ingress):
            if ingress.to_sign.value == "Taurus":
                raise ValueError("inconsistent window")
            return original(ingress)

        monkeypatch.setattr(engine_module, "ingress_transit", ingress_transit)
        engine = make_engine({Planet.MOON: linear(25, 13)})
        end = datetime(2025, 1, 4, tzinfo=timezone.utc)

        with caplog.at_level(logging.WARNING):
            transits = by_id(engine.find_transits_in_range(JAN_1, end, [Planet.MOON]))

        assert "MOON_INGRESS_Taurus" not in transits
        assert "MOON_INGRESS_Gemini" in transits
        assert "MOON_IN_Gemini" in transits
        assert "Skipping Moon ingress into Taurus" in caplog.text


# ---------------------------------------------------------------------------
# Result invariants
# ---------------------------------------------------------------------------

class TestResultInvariants:
    """Properties every sweep result must satisfy."""

    @pytest.fixture
    def transits(self, make_engine):
        motions = {
            Planet.SUN: linear(62, 1),
            Planet.MOON: linear(25, 13),
            Planet.MERCURY: linear(199, -0.5),
        }
        return make_engine(motions).find_transits_in_range(JAN_1, JAN_31)

    def test_windows_contain_exact(self, transits):
        for t in transits:
            assert t.start_date <= t.exact_date <= t.end_date

    def test_type_ids_unique(self, transits):
        ids = [t.transit_type_id for t in transits]
        assert len(ids) == len(set(ids))

    def test_sorted_by_timing_then_intensity(self, transits):
        for a, b in zip(transits, transits[1:]):
            assert priority(a) <= priority(b)
            if priority(a) == priority(b):
                assert a.intensity >= b.intensity

    def test_all_classified(self, transits):
        for t in transits:
            assert t.timing is not None
            assert 0.0 <= t.intensity <= 100.0


# ---------------------------------------------------------------------------
# Failure handling
# ---------------------------------------------------------------------------

class TestFailures:
    """Per-combination failures are skipped; total failure is reported."""

    def test_partial_failure_skips_combinations(self, make_engine, caplog):
        engine = make_engine(failing={Planet.MARS})
        with caplog.at_level(logging.WARNING, logger="astroreflect_mcp.utils.transit_engine"):
            transits = engine.find_transits_in_range(JAN_1, JAN_31, [Planet.SUN, Planet.MARS])

        assert [t.transit_type_id for t in transits] == ["SUN_IN_Aries"]
        assert "Mars" in caplog.text

    def test_total_failure_raises(self, broken_engine):
        with pytest.raises(EphemerisError, match="failed"):
            broken_engine.find_transits_in_range(JAN_1, JAN_31)

    def test_failures_are_not_cached(self):
        oracle = BrokenOracle()
        position = _PositionCache(oracle)
        for _ in range(2):
            with pytest.raises(EphemerisError):
                position(Planet.SUN, NOW)
        assert oracle.calls == 2
        assert position.failures == 2
        assert position.successes == 0

    def test_samples_cached_per_second(self):
        oracle = FakeOracle()
        position = _PositionCache(oracle)
        first = position(Planet.SUN, NOW)
        second = position(Planet.SUN, NOW + timedelta(milliseconds=200))
        assert first is second
        assert oracle.calls == 1


# ---------------------------------------------------------------------------
# Current and sample transits
# ---------------------------------------------------------------------------

class TestCurrentTransits:

    def test_defaults_to_clock(self, make_engine):
        engine = make_engine()
        assert (
            [t.transit_type_id for t in engine.get_current_transits()]
            == [t.transit_type_id for t in engine.find_transits_in_range(
                NOW - timedelta(days=3), NOW + timedelta(days=3))]
        )

    def test_custom_center_and_range(self, make_engine):
        engine = make_engine({Planet.SUN: linear(62, 1), Planet.MARS: static(0)})
        # Jan 20 → Jan 30: the square enters orb and goes exact on Jan 29
        transits = by_id(engine.get_current_transits(datetime(2025, 1, 25), 5))
        assert transits["MARS_Square_SUN"].exact_date == datetime(2025, 1, 29, tzinfo=timezone.utc)


class TestSampleTransits:
    """get_sample_transits never returns an empty list."""

    def test_real_results_returned_as_is(self, make_engine):
        engine = make_engine()
        samples = engine.get_sample_transits()

        assert len(samples) >= 3
        ids = {t.transit_type_id for t in samples}
        assert "MARS_Square_SUN" not in ids
        assert ids == {t.transit_type_id for t in engine.get_current_transits(NOW, 5)}

    def test_padding_when_few_results(self, make_engine):
        failing = set(Planet) - {Planet.MOON}
        engine = make_engine(failing=failing)
        samples = engine.get_sample_transits()

        assert [t.transit_type_id for t in samples] == [
            "MOON_IN_Taurus",
            "MARS_Square_SUN",
            "JUPITER_Trine_VENUS",
        ]
        assert samples[1].timing == TransitTiming.APPLYING
        assert samples[1].intensity == pytest.approx(50.0)

    def test_fallback_when_oracle_always_fails(self, broken_engine, caplog):
        with caplog.at_level(logging.ERROR, logger="astroreflect_mcp.utils.transit_engine"):
            samples = broken_engine.get_sample_transits()

        assert [t.transit_type_id for t in samples] == [
            "MERCURY_Conjunction_VENUS",
            "MOON_Opposition_SATURN",
            "JUPITER_Trine_SUN",
        ]
        assert all(t.timing is not None for t in samples)
        assert "fallback" in caplog.text

    def test_fallback_relative_to_date(self, broken_engine):
        date = datetime(2030, 6, 1, tzinfo=timezone.utc)
        samples = by_id(broken_engine.get_sample_transits(date))
        assert samples["MERCURY_Conjunction_VENUS"].exact_date == date
        assert samples["JUPITER_Trine_SUN"].exact_date == date + timedelta(days=3)


class TestEngineConstruction:

    def test_default_clock_is_utc_now(self):
        engine = TransitEngine(FakeOracle())
        now = engine.clock()
        assert now.tzinfo is not None
        assert abs(now - datetime.now(timezone.utc)) < timedelta(minutes=1)
