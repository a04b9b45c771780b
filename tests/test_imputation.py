"""
Tests for fuel/battery level imputation.
"""

import copy

import pytest

from conftest import T0
from fleet_series.imputation import fill_levels


def make_points(fuel=None, battery=None):
    count = len(fuel or battery)
    return [
        {
            "ts_ms": T0 + i * 5000,
            "speed_avg": 10.0,
            "fuel_pct": fuel[i] if fuel else None,
            "battery_pct": battery[i] if battery else None,
        }
        for i in range(count)
    ]


class TestFillLevels:
    """Tests for fill_levels()."""

    def test_carry_forward_without_leading_fill(self):
        points = make_points(fuel=[None, 80.0, None, None, 60.0, None])
        filled = fill_levels(points, "ICE", "carry")
        assert [p["fuel_pct"] for p in filled] == [None, 80.0, 80.0, 80.0, 60.0, 60.0]

    def test_backfill_seeds_leading_run(self):
        points = make_points(fuel=[None, None, 80.0, None, 60.0])
        filled = fill_levels(points, "ICE", "backfill")
        assert [p["fuel_pct"] for p in filled] == [80.0, 80.0, 80.0, 80.0, 60.0]

    def test_electric_fills_battery_only(self):
        points = make_points(battery=[90.0, None, None])
        points[1]["fuel_pct"] = 30.0
        filled = fill_levels(points, "EV")
        assert [p["battery_pct"] for p in filled] == [90.0, 90.0, 90.0]
        assert [p["fuel_pct"] for p in filled] == [None, 30.0, None]

    def test_unknown_kind_fills_nothing(self):
        points = make_points(fuel=[50.0, None])
        filled = fill_levels(points, None)
        assert [p["fuel_pct"] for p in filled] == [50.0, None]

    def test_never_fills_with_a_future_value(self):
        values = [None, None, 70.0, None, 65.0, None, None, 40.0]
        filled = fill_levels(make_points(fuel=values), "ICE")
        last_seen = None
        for original, point in zip(values, filled):
            if original is not None:
                last_seen = original
            assert point["fuel_pct"] == last_seen

    def test_all_missing_stays_none(self):
        filled = fill_levels(make_points(fuel=[None, None, None]), "ICE", "backfill")
        assert [p["fuel_pct"] for p in filled] == [None, None, None]

    def test_input_is_not_mutated(self):
        points = make_points(fuel=[80.0, None])
        before = copy.deepcopy(points)
        filled = fill_levels(points, "ICE")
        assert points == before
        assert filled[1] is not points[1]

    def test_empty(self):
        assert fill_levels([], "EV") == []

    def test_unknown_policy_raises(self):
        with pytest.raises(ValueError):
            fill_levels([], "ICE", "interpolate")
