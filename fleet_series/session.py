"""
Series Builder for Fleet Telemetry Series

This module orchestrates the complete pipeline, turning raw telemetry records
and an optional query window into a chart-ready payload.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from . import aggregation
from . import bucketing
from . import constants
from . import domain
from . import imputation
from . import normalizer
from . import time_series

logger = logging.getLogger(__name__)


def build_row_stream(samples: pd.DataFrame) -> pd.DataFrame:
    """
    Collapse samples to one per second and insert gap break rows.

    Args:
        samples: Normalized sample table.

    Returns:
        Row stream ascending by ts_ms, not yet restricted to any window.
    """
    collapsed = time_series.collapse_to_seconds(samples)
    return time_series.insert_gap_breaks(collapsed)


def aggregate_rows(rows: pd.DataFrame, window: Optional[domain.TimeWindow],
                   bucket_table: str = constants.DEFAULT_BUCKET_TABLE,
                   vehicle_kind: Optional[str] = None,
                   level_summary: str = constants.DEFAULT_LEVEL_SUMMARY,
                   level_fill: str = constants.DEFAULT_LEVEL_FILL) -> Tuple[List[Dict], int]:
    """
    Window, bucket, aggregate and impute a row stream.

    The bucket width comes from the window span, or from the span of the
    retained rows when there is no window.

    Args:
        rows: Row stream from build_row_stream().
        window: Resolved window, or None.
        bucket_table: Name of the bucket-width table.
        vehicle_kind: "EV", "ICE" or None.
        level_summary: In-bucket level policy, "last" or "mean".
        level_fill: Cross-bucket level policy, "carry" or "backfill".

    Returns:
        Tuple (points, bucket_ms).
    """
    rows = time_series.filter_to_window(rows, window)

    if window is not None:
        span_ms = window.span_ms
    else:
        span_ms = bucketing.data_span_ms(rows)
    bucket_ms = bucketing.select_bucket_width(span_ms, bucket_table)

    bucketed = bucketing.assign_buckets(rows, bucket_ms)
    points = aggregation.aggregate_buckets(bucketed, vehicle_kind, level_summary)
    points = imputation.fill_levels(points, vehicle_kind, level_fill)
    return points, bucket_ms


def aggregate_series(samples: pd.DataFrame, window: Optional[domain.TimeWindow] = None,
                     bucket_table: str = constants.DEFAULT_BUCKET_TABLE,
                     vehicle_kind: Optional[str] = None,
                     level_summary: str = constants.DEFAULT_LEVEL_SUMMARY,
                     level_fill: str = constants.DEFAULT_LEVEL_FILL) -> List[Dict]:
    """
    Pure transform from normalized samples and a window to output points.

    Args:
        samples: Normalized sample table from normalize_samples().
        window: Resolved window, or None to use the data span.
        bucket_table: Name of the bucket-width table.
        vehicle_kind: "EV", "ICE" or None.
        level_summary: In-bucket level policy.
        level_fill: Cross-bucket level policy.

    Returns:
        List of output point dictionaries ascending by ts_ms.
    """
    points, _ = aggregate_rows(
        build_row_stream(samples), window,
        bucket_table=bucket_table,
        vehicle_kind=vehicle_kind,
        level_summary=level_summary,
        level_fill=level_fill,
    )
    return points


def has_plottable_data(points: List[Dict]) -> bool:
    """True if any point carries a speed, emissions or level value."""
    fields = ("speed_avg", "emissions_avg", "fuel_pct", "battery_pct")
    return any(point[field] is not None for point in points for field in fields)


def build_series_payload(records: Sequence[Dict], from_value=None, to_value=None,
                         vehicle_id: Optional[str] = None,
                         vehicle_kind: Optional[str] = None,
                         now_ms: Optional[int] = None,
                         bucket_table: str = constants.DEFAULT_BUCKET_TABLE,
                         level_fill: str = constants.DEFAULT_LEVEL_FILL,
                         level_summary: str = constants.DEFAULT_LEVEL_SUMMARY,
                         default_window_ms: int = constants.DEFAULT_WINDOW_MS,
                         tick_count: int = 6) -> Dict:
    """
    Build the complete chart payload for one vehicle.

    Main entry point that runs the whole pipeline:
    1. Normalizes raw records
    2. Decides the vehicle kind
    3. Collapses to one sample per second and inserts gap breaks
    4. Resolves the query window
    5. Buckets, aggregates and imputes
    6. Describes the fixed axis domain

    Args:
        records: Raw telemetry records.
        from_value: Optional lower window bound (ISO-8601, datetime or ms).
        to_value: Optional upper window bound.
        vehicle_id: If given, only records for this vehicle are used.
        vehicle_kind: "EV" or "ICE" if known; inferred otherwise.
        now_ms: Caller's current time, used for the default trailing window.
        bucket_table: Name of the bucket-width table.
        level_fill: Cross-bucket level policy.
        level_summary: In-bucket level policy.
        default_window_ms: Length of the default trailing window.
        tick_count: Number of axis ticks to emit.

    Returns:
        Dictionary containing:
        - vehicle_id: Requested vehicle id, or None
        - vehicle_kind: "EV", "ICE" or None
        - window: Resolved window (from_ms, to_ms, from, to), or None
        - bucket_ms: Bucket width used
        - axis: Fixed axis domain with ticks, or None
        - points: Chart-ready output points
        - has_data: Whether any point carries a value
        - sample_count: Number of valid raw samples

    Raises:
        TypeError: If records is not a list or tuple.
        ValueError: If a window bound, table or policy name is invalid.
    """
    samples = normalizer.normalize_samples(records, vehicle_id=vehicle_id)
    kind = normalizer.infer_vehicle_kind(samples, vehicle_kind)
    rows = build_row_stream(samples)

    from_ms, to_ms = domain.parse_window_bounds(from_value, to_value)
    data_bounds = None
    if not rows.empty:
        data_bounds = (int(rows["ts_ms"].min()), int(rows["ts_ms"].max()))
    window = domain.resolve_window(
        from_ms, to_ms,
        now_ms=now_ms,
        default_span_ms=default_window_ms,
        data_bounds=data_bounds,
    )

    points, bucket_ms = aggregate_rows(
        rows, window,
        bucket_table=bucket_table,
        vehicle_kind=kind,
        level_summary=level_summary,
        level_fill=level_fill,
    )
    axis = domain.build_axis_domain(window, bucket_ms)

    logger.info(
        "Built series for vehicle %s: %d samples -> %d points (bucket %d ms)",
        vehicle_id or "<all>", len(samples), len(points), bucket_ms,
    )

    return {
        "vehicle_id": vehicle_id,
        "vehicle_kind": kind,
        "window": window.to_dict() if window is not None else None,
        "bucket_ms": bucket_ms,
        "axis": axis.to_dict(tick_count) if axis is not None else None,
        "points": points,
        "has_data": has_plottable_data(points),
        "sample_count": len(samples),
    }
