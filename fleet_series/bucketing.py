"""
Adaptive Bucketing for Fleet Telemetry Series

This module picks a bucket width from the requested window span, so longer
windows are summarized more coarsely, and assigns every row to a bucket.
"""

import numpy as np
import pandas as pd

from . import constants


def get_bucket_table(name: str = constants.DEFAULT_BUCKET_TABLE):
    """
    Look up a bucket-width table by name.

    Args:
        name: "fine" or "coarse".

    Returns:
        Tuple of (upper span bound in ms or None, bucket width in ms).

    Raises:
        ValueError: If the table name is unknown.
    """
    try:
        return constants.BUCKET_TABLES[name]
    except KeyError:
        raise ValueError(
            f"Unknown bucket table {name!r}; expected one of {sorted(constants.BUCKET_TABLES)}"
        ) from None


def select_bucket_width(span_ms: int, table: str = constants.DEFAULT_BUCKET_TABLE) -> int:
    """
    Choose the bucket width for a window span.

    Args:
        span_ms: Window span in milliseconds. Negative spans are treated as 0.
        table: Name of the bucket-width table to use.

    Returns:
        Bucket width in milliseconds.
    """
    span_ms = max(0, span_ms)
    for upper_ms, width_ms in get_bucket_table(table):
        if upper_ms is None or span_ms <= upper_ms:
            return width_ms
    return width_ms


def bucket_key(ts_ms: int, width_ms: int) -> int:
    """Start of the bucket containing ts_ms."""
    return (int(ts_ms) // width_ms) * width_ms


def assign_buckets(rows: pd.DataFrame, width_ms: int) -> pd.DataFrame:
    """
    Tag every row, real or break, with the start of its bucket.

    Args:
        rows: Row stream from the gap segmenter.
        width_ms: Bucket width from select_bucket_width().

    Returns:
        New DataFrame with an added ``bucket_ms`` column.
    """
    ts = rows["ts_ms"].to_numpy(dtype=np.int64)
    return rows.assign(bucket_ms=(ts // width_ms) * width_ms)


def data_span_ms(rows: pd.DataFrame) -> int:
    """Span between the first and last row of a non-empty row stream."""
    if rows.empty:
        return 0
    return int(rows["ts_ms"].max() - rows["ts_ms"].min())
