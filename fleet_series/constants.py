"""
Constants for Fleet Telemetry Series

This module defines the thresholds, bucket-width tables, default policies and
path constants used throughout the series pipeline. A handful of defaults can
be overridden through environment variables, read once at import time.
"""

import os
from pathlib import Path

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

# Telemetry folder is one level up from fleet_series/
DATA_DIR = Path(os.getenv("FLEET_SERIES_DATA_DIR", Path(__file__).parent.parent / "Telemetry Data"))

# Consecutive seconds further apart than this get a break row between them
GAP_THRESHOLD_MS = 2000

# Offset of a break row after the last real second before a gap
BREAK_OFFSET_MS = 1

# Bucket-width tables: (inclusive upper span bound, width); None bounds the tail
BUCKET_TABLES = {
    "fine": (
        (15 * MINUTE_MS, 5 * SECOND_MS),
        (HOUR_MS, 30 * SECOND_MS),
        (DAY_MS, 5 * MINUTE_MS),
        (7 * DAY_MS, HOUR_MS),
        (None, 3 * HOUR_MS),
    ),
    "coarse": (
        (HOUR_MS, MINUTE_MS),
        (DAY_MS, 5 * MINUTE_MS),
        (7 * DAY_MS, HOUR_MS),
        (None, 3 * HOUR_MS),
    ),
}

LEVEL_FILL_POLICIES = ("carry", "backfill")
LEVEL_SUMMARY_POLICIES = ("last", "mean")

DEFAULT_BUCKET_TABLE = os.getenv("FLEET_SERIES_BUCKET_TABLE", "fine")
DEFAULT_LEVEL_FILL = os.getenv("FLEET_SERIES_LEVEL_FILL", "carry")
DEFAULT_LEVEL_SUMMARY = os.getenv("FLEET_SERIES_LEVEL_SUMMARY", "last")
DEFAULT_WINDOW_MS = int(float(os.getenv("FLEET_SERIES_DEFAULT_WINDOW_HOURS", "24")) * HOUR_MS)

# Most series payloads the HTTP layer keeps in memory
SERIES_CACHE_SIZE = int(os.getenv("FLEET_SERIES_CACHE_SIZE", "128"))

VEHICLE_KIND_ELECTRIC = "EV"
VEHICLE_KIND_COMBUSTION = "ICE"

CSV_HEADER = ["timestamp", "speed", "fuel_level", "battery_level", "emissions"]
