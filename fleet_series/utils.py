"""
Utility Functions for Fleet Telemetry Series

This module provides helper functions for value coercion, rounding, and
timestamp conversion used throughout the series pipeline.
"""

import math
from datetime import datetime
from typing import Optional

import numpy as np
import pandas as pd

# Latest instant a pandas Timestamp can hold, in epoch milliseconds
MAX_TIMESTAMP_MS = pd.Timestamp.max.value // 1_000_000

# Strings pandas resolves against the host clock
CLOCK_KEYWORDS = ("now", "today")


def safe_float(value) -> float:
    """
    Safely convert a value to float, returning NaN on failure.

    Booleans are rejected so that a stray ``True`` never reads as 1.0.

    Args:
        value: Value to convert (string, number, etc.).

    Returns:
        Float value, or np.nan if conversion fails.
    """
    if isinstance(value, bool):
        return np.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return np.nan


def round_float(value, digits: int = 1) -> Optional[float]:
    """
    Round a float value half away from zero, handling None, NaN, and Inf.

    Args:
        value: Value to round.
        digits: Number of decimal places. Default 1.

    Returns:
        Rounded float, or None if value is None, NaN, or Inf.
    """
    if value is None:
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    factor = 10 ** digits
    return math.copysign(math.floor(abs(value) * factor + 0.5) / factor, value)


def clamp_pct(value) -> float:
    """
    Clamp a percentage into [0, 100].

    Args:
        value: Raw level reading.

    Returns:
        Clamped float, or np.nan when the value is absent or not a finite number.
    """
    number = safe_float(value)
    if not math.isfinite(number):
        return np.nan
    return min(max(number, 0.0), 100.0)


def parse_timestamp_ms(value) -> Optional[int]:
    """
    Convert a timestamp to integer epoch milliseconds.

    Accepts ISO-8601 strings, datetime objects, and numeric epoch
    milliseconds. Naive timestamps are taken as UTC. Strings must be
    ISO-8601 dates; clock keywords such as "now" are rejected so the
    result never depends on when it is called.

    Args:
        value: Raw timestamp value.

    Returns:
        Epoch milliseconds, or None if the value cannot be parsed or lies
        outside [0, MAX_TIMESTAMP_MS].
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, np.integer, np.floating)):
        if not math.isfinite(value) or value < 0 or value > MAX_TIMESTAMP_MS:
            return None
        return int(value)

    if isinstance(value, str) and value.strip().lower() in CLOCK_KEYWORDS:
        return None
    if not isinstance(value, (str, datetime)):
        return None

    try:
        if isinstance(value, str):
            ts = pd.to_datetime(value, format="ISO8601")
        else:
            ts = pd.Timestamp(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")

    ms = ts.value // 1_000_000
    if ms < 0:
        return None
    return int(ms)


def ms_to_iso(ms: int) -> str:
    """Render epoch milliseconds as an ISO-8601 UTC string."""
    return pd.Timestamp(int(ms), unit="ms", tz="UTC").isoformat()


def none_if_nan(value) -> Optional[float]:
    """Return value as float, or None for None/NaN/Inf."""
    if value is None:
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value
