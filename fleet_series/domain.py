"""
Time Domain Alignment for Fleet Telemetry Series

This module resolves the query window (applying the default trailing window
when the caller gives no bounds) and describes the fixed time axis a chart
should draw, independent of how dense the data happens to be.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from . import constants
from . import utils


@dataclass(frozen=True)
class TimeWindow:
    """Inclusive query window in epoch milliseconds."""

    from_ms: int
    to_ms: int

    @property
    def span_ms(self) -> int:
        return self.to_ms - self.from_ms

    @property
    def is_valid(self) -> bool:
        return self.from_ms <= self.to_ms

    def to_dict(self) -> dict:
        return {
            "from_ms": self.from_ms,
            "to_ms": self.to_ms,
            "from": utils.ms_to_iso(self.from_ms),
            "to": utils.ms_to_iso(self.to_ms),
        }


def parse_window_bounds(from_value=None, to_value=None) -> Tuple[Optional[int], Optional[int]]:
    """
    Parse optional window bounds into epoch milliseconds.

    Args:
        from_value: Lower bound as ISO-8601 string, datetime or epoch ms.
        to_value: Upper bound, same forms.

    Returns:
        Tuple (from_ms, to_ms); a missing bound is None.

    Raises:
        ValueError: If a bound is supplied but cannot be parsed.
    """
    bounds = []
    for name, value in (("from", from_value), ("to", to_value)):
        if value is None or value == "":
            bounds.append(None)
            continue
        ms = utils.parse_timestamp_ms(value)
        if ms is None:
            raise ValueError(f"Invalid '{name}' timestamp: {value!r}")
        bounds.append(ms)
    return bounds[0], bounds[1]


def resolve_window(from_ms: Optional[int] = None, to_ms: Optional[int] = None,
                   now_ms: Optional[int] = None,
                   default_span_ms: int = constants.DEFAULT_WINDOW_MS,
                   data_bounds: Optional[Tuple[int, int]] = None) -> Optional[TimeWindow]:
    """
    Resolve the window the series is computed and drawn over.

    Resolution order:
    1. Both bounds given: use them as-is (an inverted window stays inverted
       and produces an empty series downstream).
    2. No bounds and now_ms given: trailing window [now - default_span, now].
    3. One bound given: the other is taken from the data extremes.
    4. Otherwise the span of the data itself.

    Args:
        from_ms: Requested lower bound, or None.
        to_ms: Requested upper bound, or None.
        now_ms: Caller's notion of "now"; the pipeline has none of its own.
        default_span_ms: Length of the default trailing window.
        data_bounds: (first, last) timestamp of the retained rows, if any.

    Returns:
        Resolved TimeWindow, or None when nothing is known to resolve from.
    """
    if from_ms is not None and to_ms is not None:
        return TimeWindow(int(from_ms), int(to_ms))

    if from_ms is None and to_ms is None and now_ms is not None:
        return TimeWindow(int(now_ms) - int(default_span_ms), int(now_ms))

    if data_bounds is None:
        if from_ms is None and to_ms is None:
            return None
        # A single bound with no data: a zero-length window at that bound
        bound = from_ms if from_ms is not None else to_ms
        return TimeWindow(int(bound), int(bound))

    first, last = data_bounds
    return TimeWindow(
        int(from_ms) if from_ms is not None else int(first),
        int(to_ms) if to_ms is not None else int(last),
    )


def format_tick(ms: int, span_ms: Optional[int]) -> str:
    """
    Format an axis tick label for the given window span.

    Args:
        ms: Tick position in epoch milliseconds.
        span_ms: Window span; None uses a plain time-of-day label.

    Returns:
        "HH:MM:SS" without a span, "HH:MM" up to 2 h, "MM/DD HH" up to
        48 h, and "MM/DD" beyond.
    """
    ts = pd.Timestamp(int(ms), unit="ms", tz="UTC")
    if not span_ms:
        return ts.strftime("%H:%M:%S")
    if span_ms <= 2 * constants.HOUR_MS:
        return ts.strftime("%H:%M")
    if span_ms <= 48 * constants.HOUR_MS:
        return ts.strftime("%m/%d %H")
    return ts.strftime("%m/%d")


@dataclass(frozen=True)
class AxisDomain:
    """Fixed x-axis description for a chart renderer."""

    from_ms: int
    to_ms: int
    bucket_ms: int

    @property
    def span_ms(self) -> int:
        return max(0, self.to_ms - self.from_ms)

    def ticks(self, count: int = 6) -> List[int]:
        """Evenly spaced tick positions across [from_ms, to_ms], both ends included."""
        if count < 2 or self.span_ms == 0:
            return [self.from_ms]
        return [int(t) for t in np.linspace(self.from_ms, self.to_ms, count).round()]

    def tick_label(self, ms: int) -> str:
        return format_tick(ms, self.span_ms)

    def to_dict(self, tick_count: int = 6) -> dict:
        ticks = self.ticks(tick_count)
        return {
            "from_ms": self.from_ms,
            "to_ms": self.to_ms,
            "span_ms": self.span_ms,
            "bucket_ms": self.bucket_ms,
            "ticks": ticks,
            "tick_labels": [self.tick_label(t) for t in ticks],
        }


def build_axis_domain(window: Optional[TimeWindow], bucket_ms: int) -> Optional[AxisDomain]:
    """
    Describe the fixed axis for a resolved window.

    Args:
        window: Resolved window from resolve_window().
        bucket_ms: Bucket width chosen for the series.

    Returns:
        AxisDomain, or None if no window could be resolved. An inverted
        window is collapsed to a zero-length domain at its lower bound.
    """
    if window is None:
        return None
    if not window.is_valid:
        return AxisDomain(window.from_ms, window.from_ms, bucket_ms)
    return AxisDomain(window.from_ms, window.to_ms, bucket_ms)
