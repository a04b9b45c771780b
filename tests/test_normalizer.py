"""
Tests for sample normalization and vehicle-kind inference.
"""

import copy
import math

import pandas as pd
import pytest

from conftest import T0, make_record
from fleet_series.normalizer import infer_vehicle_kind, normalize_samples


class TestNormalizeSamples:
    """Tests for normalize_samples()."""

    def test_valid_records_pass_through_in_input_order(self):
        records = [make_record(5, speed=10.0), make_record(1, speed=20.0), make_record(3, speed=30.0)]
        samples = normalize_samples(records)
        assert samples["timestamp_ms"].tolist() == [T0 + 5000, T0 + 1000, T0 + 3000]
        assert samples["speed_kmh"].tolist() == [10.0, 20.0, 30.0]

    def test_malformed_records_are_dropped(self):
        records = [
            make_record(0),
            {k: v for k, v in make_record(1).items() if k != "vehicle_id"},
            make_record(2, timestamp="not a time"),
            make_record(3, timestamp=-5),
            make_record(4, timestamp=float("inf")),
            make_record(5, speed="fast"),
            make_record(6, speed=float("nan")),
            make_record(7, emissions=None),
            make_record(8, emissions=float("inf")),
            "not a record",
            make_record(9),
        ]
        samples = normalize_samples(records)
        assert samples["timestamp_ms"].tolist() == [T0, T0 + 9000]

    def test_timestamp_past_datetime_range_dropped(self):
        samples = normalize_samples([make_record(0, timestamp=10**16), make_record(1, timestamp=9.3e15), make_record(2)])
        assert samples["timestamp_ms"].tolist() == [T0 + 2000]

    @pytest.mark.parametrize("keyword", ["now", "today", " Now ", "TODAY"])
    def test_clock_keyword_timestamps_dropped(self, keyword):
        samples = normalize_samples([make_record(0, timestamp=keyword), make_record(1)])
        assert samples["timestamp_ms"].tolist() == [T0 + 1000]

    def test_stored_values_are_kept_verbatim(self):
        samples = normalize_samples([make_record(0, speed=30, fuel=120, timestamp="2023-11-14T21:00:00Z")])
        row = samples.iloc[0]
        assert row["raw_timestamp"] == "2023-11-14T21:00:00Z"
        assert row["raw_speed"] == 30 and isinstance(row["raw_speed"], int)
        assert row["raw_fuel_level"] == 120
        assert row["raw_battery_level"] is None
        assert row["fuel_level_pct"] == 100.0

    def test_negative_speed_or_emissions_dropped(self):
        samples = normalize_samples([make_record(0, speed=-1.0), make_record(1, emissions=-3.0)])
        assert samples.empty

    def test_iso_timestamps_are_parsed(self):
        records = [
            make_record(0, timestamp="2023-11-14T21:00:00Z"),
            make_record(0, timestamp="2023-11-14T21:00:01.500+00:00"),
            make_record(0, timestamp="2023-11-14T21:00:02"),
        ]
        samples = normalize_samples(records)
        assert samples["timestamp_ms"].tolist() == [T0, T0 + 1500, T0 + 2000]

    def test_levels_are_clamped(self):
        samples = normalize_samples([
            make_record(0, fuel=120.0),
            make_record(1, battery=-5.0),
            make_record(2, fuel=55.5),
        ])
        assert samples["fuel_level_pct"].iloc[0] == 100.0
        assert samples["battery_level_pct"].iloc[1] == 0.0
        assert samples["fuel_level_pct"].iloc[2] == 55.5

    def test_absent_or_garbage_levels_become_nan(self):
        samples = normalize_samples([make_record(0), make_record(1, fuel="n/a")])
        assert samples["fuel_level_pct"].isna().all()
        assert samples["battery_level_pct"].isna().all()

    def test_input_is_not_mutated(self, ice_records):
        before = copy.deepcopy(ice_records)
        normalize_samples(ice_records)
        assert ice_records == before

    def test_empty_input_gives_empty_table(self):
        samples = normalize_samples([])
        assert samples.empty
        assert "timestamp_ms" in samples.columns

    @pytest.mark.parametrize("bad", [None, {"vehicle_id": "x"}, "records", pd.DataFrame()])
    def test_non_sequence_input_raises(self, bad):
        with pytest.raises(TypeError):
            normalize_samples(bad)

    def test_vehicle_filter(self):
        records = [make_record(0, vehicle_id="a"), make_record(1, vehicle_id="b"), make_record(2, vehicle_id="a")]
        samples = normalize_samples(records, vehicle_id="a")
        assert samples["vehicle_id"].tolist() == ["a", "a"]

    def test_location_is_carried(self):
        samples = normalize_samples([make_record(0)])
        assert math.isclose(samples["lat"].iloc[0], 52.52)
        assert math.isclose(samples["lon"].iloc[0], 13.405)


class TestInferVehicleKind:
    """Tests for infer_vehicle_kind()."""

    def test_battery_only_is_electric(self):
        samples = normalize_samples([make_record(0, battery=50.0), make_record(1)])
        assert infer_vehicle_kind(samples) == "EV"

    def test_fuel_only_is_combustion(self):
        samples = normalize_samples([make_record(0, fuel=50.0)])
        assert infer_vehicle_kind(samples) == "ICE"

    def test_type_field_used_when_no_levels(self):
        samples = normalize_samples([make_record(0, vehicle_type="EV")])
        assert infer_vehicle_kind(samples) == "EV"

    def test_unknown_without_levels_or_type(self):
        samples = normalize_samples([make_record(0)])
        assert infer_vehicle_kind(samples) is None

    def test_empty_samples_unknown(self):
        assert infer_vehicle_kind(normalize_samples([])) is None

    def test_explicit_kind_wins(self):
        samples = normalize_samples([make_record(0, fuel=50.0)])
        assert infer_vehicle_kind(samples, "EV") == "EV"

    def test_explicit_kind_validated(self):
        with pytest.raises(ValueError):
            infer_vehicle_kind(normalize_samples([]), "HYBRID")
