"""
Bucket Aggregation for Fleet Telemetry Series

This module reduces each bucket of the row stream to one chart-ready output
point: mean and minimum speed, mean emissions, and a summarized fuel or
battery level.
"""

from typing import Dict, List, Optional

import pandas as pd

from . import constants
from . import utils


def aggregate_buckets(rows: pd.DataFrame, vehicle_kind: Optional[str] = None,
                      level_summary: str = constants.DEFAULT_LEVEL_SUMMARY) -> List[Dict]:
    """
    Summarize each bucket of the row stream.

    Break rows carry no values, so they only contribute a bucket key: a
    bucket holding nothing but break rows comes out with every field None.
    All numeric values are rounded to one decimal.

    Args:
        rows: Row stream with a ``bucket_ms`` column from assign_buckets().
        vehicle_kind: "EV" forces emissions to 0 in every bucket that has
            real rows; "ICE" or None leaves emissions as reported.
        level_summary: "last" keeps the last fuel/battery reading in the
            bucket, "mean" averages the readings.

    Returns:
        List of output point dictionaries ascending by ts_ms, with keys
        ts_ms, timestamp, speed_avg, speed_min, fuel_pct, battery_pct,
        emissions_avg.

    Raises:
        ValueError: If level_summary is not a known policy.
    """
    if level_summary not in constants.LEVEL_SUMMARY_POLICIES:
        raise ValueError(
            f"Unknown level summary {level_summary!r}; expected one of {constants.LEVEL_SUMMARY_POLICIES}"
        )

    if rows.empty:
        return []

    grouped = rows.groupby("bucket_ms", sort=True)
    summary = grouped.agg(
        speed_avg=("speed_kmh", "mean"),
        speed_min=("speed_kmh", "min"),
        emissions_avg=("emissions_g_per_km", "mean"),
        fuel_pct=("fuel_level_pct", level_summary),
        battery_pct=("battery_level_pct", level_summary),
    )

    if vehicle_kind == constants.VEHICLE_KIND_ELECTRIC:
        summary["emissions_avg"] = summary["emissions_avg"].where(summary["emissions_avg"].isna(), 0.0)

    points = []
    for row in summary.itertuples():
        ts_ms = int(row.Index)
        points.append({
            "ts_ms": ts_ms,
            "timestamp": utils.ms_to_iso(ts_ms),
            "speed_avg": utils.round_float(row.speed_avg),
            "speed_min": utils.round_float(row.speed_min),
            "fuel_pct": utils.round_float(row.fuel_pct),
            "battery_pct": utils.round_float(row.battery_pct),
            "emissions_avg": utils.round_float(row.emissions_avg),
        })

    return points
