"""
Time Series Shaping for Fleet Telemetry Series

This module turns normalized samples into the row stream that gets bucketed:
it collapses samples to one per wall-clock second, inserts break rows across
telemetry outages, and restricts the stream to the query window.
"""

from typing import Optional

import numpy as np
import pandas as pd

from . import constants
from .domain import TimeWindow

ROW_COLUMNS = [
    "ts_ms",
    "speed_kmh",
    "emissions_g_per_km",
    "fuel_level_pct",
    "battery_level_pct",
    "is_break",
]


def empty_rows() -> pd.DataFrame:
    """Return an empty row stream with the canonical columns."""
    return pd.DataFrame(columns=ROW_COLUMNS)


def collapse_to_seconds(samples: pd.DataFrame) -> pd.DataFrame:
    """
    Keep one sample per wall-clock second, latest wins.

    Samples are sorted by timestamp with a stable sort, so among samples
    with identical timestamps the one appearing later in the input is kept.

    Args:
        samples: Normalized sample table from normalize_samples().

    Returns:
        New DataFrame sorted ascending by second, with an added ``second``
        column. Running it again on its own output changes nothing.
    """
    if samples.empty:
        df = samples.copy()
        df["second"] = pd.Series(dtype=np.int64)
        return df

    df = samples.sort_values("timestamp_ms", kind="mergesort")
    df = df.assign(second=df["timestamp_ms"].astype(np.int64) // constants.SECOND_MS)
    df = df.drop_duplicates(subset="second", keep="last")
    return df.reset_index(drop=True)


def insert_gap_breaks(collapsed: pd.DataFrame,
                      gap_threshold_ms: int = constants.GAP_THRESHOLD_MS) -> pd.DataFrame:
    """
    Build the row stream, inserting break rows across telemetry gaps.

    Each retained second becomes a row timestamped at the start of that
    second. Wherever two consecutive seconds are more than gap_threshold_ms
    apart, a break row with every value column set to NaN is placed one
    millisecond after the earlier second.

    Args:
        collapsed: Output of collapse_to_seconds().
        gap_threshold_ms: Largest spacing that is still drawn as a
            continuous line. Default 2000.

    Returns:
        DataFrame with ROW_COLUMNS, ascending by ts_ms.
    """
    if collapsed.empty:
        return empty_rows()

    seconds = collapsed["second"].to_numpy(dtype=np.int64)
    rows = pd.DataFrame({
        "ts_ms": seconds * constants.SECOND_MS,
        "speed_kmh": collapsed["speed_kmh"].to_numpy(dtype=float),
        "emissions_g_per_km": collapsed["emissions_g_per_km"].to_numpy(dtype=float),
        "fuel_level_pct": collapsed["fuel_level_pct"].to_numpy(dtype=float),
        "battery_level_pct": collapsed["battery_level_pct"].to_numpy(dtype=float),
        "is_break": False,
    })

    gaps = np.diff(seconds) * constants.SECOND_MS > gap_threshold_ms
    if not gaps.any():
        return rows

    prev_seconds = seconds[:-1][gaps]
    breaks = pd.DataFrame({
        "ts_ms": prev_seconds * constants.SECOND_MS + constants.BREAK_OFFSET_MS,
        "speed_kmh": np.nan,
        "emissions_g_per_km": np.nan,
        "fuel_level_pct": np.nan,
        "battery_level_pct": np.nan,
        "is_break": True,
    })

    combined = pd.concat([rows, breaks], ignore_index=True)
    combined = combined.sort_values("ts_ms", kind="mergesort")
    return combined.reset_index(drop=True)


def filter_to_window(rows: pd.DataFrame, window: Optional[TimeWindow]) -> pd.DataFrame:
    """
    Restrict the row stream to an inclusive time window.

    Args:
        rows: Row stream from insert_gap_breaks().
        window: Resolved query window, or None to keep every row.

    Returns:
        Filtered DataFrame. An inverted window yields an empty stream.
    """
    if window is None:
        return rows
    if not window.is_valid:
        return rows.iloc[0:0]
    mask = (rows["ts_ms"] >= window.from_ms) & (rows["ts_ms"] <= window.to_ms)
    return rows.loc[mask].reset_index(drop=True)
