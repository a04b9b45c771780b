"""
Tests for bucket-width selection and bucket assignment.
"""

import math

import pandas as pd
import pytest

from conftest import T0, make_record
from fleet_series.bucketing import assign_buckets, bucket_key, select_bucket_width
from fleet_series.constants import DAY_MS, HOUR_MS, MINUTE_MS, SECOND_MS
from fleet_series.domain import TimeWindow
from fleet_series.normalizer import normalize_samples
from fleet_series.session import aggregate_series


class TestSelectBucketWidth:
    """Tests for select_bucket_width()."""

    @pytest.mark.parametrize("span_ms, expected", [
        (0, 5 * SECOND_MS),
        (10 * MINUTE_MS, 5 * SECOND_MS),
        (15 * MINUTE_MS, 5 * SECOND_MS),
        (15 * MINUTE_MS + 1, 30 * SECOND_MS),
        (HOUR_MS, 30 * SECOND_MS),
        (HOUR_MS + 1, 5 * MINUTE_MS),
        (DAY_MS, 5 * MINUTE_MS),
        (3 * DAY_MS, HOUR_MS),
        (7 * DAY_MS, HOUR_MS),
        (7 * DAY_MS + 1, 3 * HOUR_MS),
        (90 * DAY_MS, 3 * HOUR_MS),
    ])
    def test_fine_table(self, span_ms, expected):
        assert select_bucket_width(span_ms, "fine") == expected

    @pytest.mark.parametrize("span_ms, expected", [
        (10 * MINUTE_MS, MINUTE_MS),
        (HOUR_MS, MINUTE_MS),
        (2 * HOUR_MS, 5 * MINUTE_MS),
        (2 * DAY_MS, HOUR_MS),
        (8 * DAY_MS, 3 * HOUR_MS),
    ])
    def test_coarse_table(self, span_ms, expected):
        assert select_bucket_width(span_ms, "coarse") == expected

    def test_default_table_is_fine(self):
        assert select_bucket_width(10 * MINUTE_MS) == 5 * SECOND_MS

    def test_negative_span_treated_as_zero(self):
        assert select_bucket_width(-HOUR_MS) == 5 * SECOND_MS

    def test_unknown_table_raises(self):
        with pytest.raises(ValueError):
            select_bucket_width(HOUR_MS, "medium")


class TestAssignBuckets:
    """Tests for bucket_key() and assign_buckets()."""

    def test_bucket_key_floors(self):
        assert bucket_key(T0 + 4999, 5000) == T0
        assert bucket_key(T0 + 5000, 5000) == T0 + 5000

    def test_every_row_gets_a_bucket(self):
        rows = pd.DataFrame({"ts_ms": [T0, T0 + 1, T0 + 4999, T0 + 5000, T0 + 29_999]})
        bucketed = assign_buckets(rows, 5000)
        assert bucketed["bucket_ms"].tolist() == [T0, T0, T0, T0 + 5000, T0 + 25_000]
        assert "bucket_ms" not in rows.columns


class TestBucketCoverage:
    """The number of output points is bounded by the window span."""

    @pytest.mark.parametrize("span_ms", [
        10 * MINUTE_MS,
        45 * MINUTE_MS,
        6 * HOUR_MS,
        3 * DAY_MS,
        10 * DAY_MS,
    ])
    def test_point_count_bounded(self, span_ms):
        start = T0 + 1234
        step_s = max(1, span_ms // 500 // SECOND_MS)
        offsets = range(-5 * step_s, span_ms // SECOND_MS + 5 * step_s, step_s)
        samples = normalize_samples([make_record(1.234 + o) for o in offsets])
        window = TimeWindow(start, start + span_ms)

        points = aggregate_series(samples, window)

        width = select_bucket_width(span_ms)
        assert 0 < len(points) <= math.ceil(span_ms / width) + 1
