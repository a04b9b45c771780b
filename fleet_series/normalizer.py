"""
Sample Normalization for Fleet Telemetry Series

This module validates raw telemetry records from the store and coerces them
into a canonical sample table. Malformed records are dropped, never raised.
"""

import logging
import math
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

from . import constants
from . import utils

logger = logging.getLogger(__name__)

SAMPLE_COLUMNS = [
    "vehicle_id",
    "timestamp_ms",
    "speed_kmh",
    "emissions_g_per_km",
    "fuel_level_pct",
    "battery_level_pct",
    "lat",
    "lon",
    "vehicle_type",
    "raw_timestamp",
    "raw_speed",
    "raw_emissions",
    "raw_fuel_level",
    "raw_battery_level",
]

# Stored record fields kept verbatim for the raw-sample export
RAW_FIELDS = ("timestamp", "speed", "emissions", "fuel_level", "battery_level")


def empty_samples() -> pd.DataFrame:
    """Return an empty sample table with the canonical columns."""
    return pd.DataFrame(columns=SAMPLE_COLUMNS)


def normalize_record(record: Dict) -> Optional[Dict]:
    """
    Coerce a single raw record into a sample row.

    Args:
        record: Raw telemetry record with vehicle_id, timestamp, speed,
            emissions and optional fuel_level, battery_level, location, type.

    Returns:
        Sample dictionary keyed by SAMPLE_COLUMNS, or None if the record is
        malformed.
    """
    if not isinstance(record, dict):
        return None

    vehicle_id = record.get("vehicle_id")
    if vehicle_id is None or vehicle_id == "":
        return None

    timestamp_ms = utils.parse_timestamp_ms(record.get("timestamp"))
    if timestamp_ms is None:
        return None

    speed = utils.safe_float(record.get("speed"))
    emissions = utils.safe_float(record.get("emissions"))
    if not math.isfinite(speed) or not math.isfinite(emissions):
        return None
    if speed < 0 or emissions < 0:
        return None

    location = record.get("location") or {}
    if not isinstance(location, dict):
        location = {}

    vehicle_type = record.get("type")
    if vehicle_type not in (constants.VEHICLE_KIND_ELECTRIC, constants.VEHICLE_KIND_COMBUSTION):
        vehicle_type = None

    return {
        "vehicle_id": str(vehicle_id),
        "timestamp_ms": timestamp_ms,
        "speed_kmh": speed,
        "emissions_g_per_km": emissions,
        "fuel_level_pct": utils.clamp_pct(record.get("fuel_level")),
        "battery_level_pct": utils.clamp_pct(record.get("battery_level")),
        "lat": utils.safe_float(location.get("lat")),
        "lon": utils.safe_float(location.get("lon")),
        "vehicle_type": vehicle_type,
        **{f"raw_{field}": record.get(field) for field in RAW_FIELDS},
    }


def normalize_samples(records: Sequence[Dict], vehicle_id: Optional[str] = None) -> pd.DataFrame:
    """
    Validate raw telemetry records into a canonical sample table.

    Input order is preserved and the input sequence is never modified.

    Args:
        records: List or tuple of raw telemetry records.
        vehicle_id: If given, keep only records for this vehicle.

    Returns:
        DataFrame with SAMPLE_COLUMNS, one row per valid record.

    Raises:
        TypeError: If records is not a list or tuple.
    """
    if not isinstance(records, (list, tuple)):
        raise TypeError(f"records must be a list of telemetry records, got {type(records).__name__}")

    rows = []
    for record in records:
        row = normalize_record(record)
        if row is None:
            continue
        if vehicle_id is not None and row["vehicle_id"] != str(vehicle_id):
            continue
        rows.append(row)

    dropped = len(records) - len(rows)
    if dropped:
        logger.debug("Dropped %d of %d telemetry records", dropped, len(records))

    if not rows:
        return empty_samples()

    df = pd.DataFrame(rows, columns=SAMPLE_COLUMNS)
    df["timestamp_ms"] = df["timestamp_ms"].astype(np.int64)
    # Object dtype keeps stored values exactly as given, ints included
    for field in RAW_FIELDS:
        column = f"raw_{field}"
        df[column] = pd.Series([row[column] for row in rows], index=df.index, dtype=object)
    return df


def infer_vehicle_kind(samples: pd.DataFrame, explicit: Optional[str] = None) -> Optional[str]:
    """
    Decide whether the samples belong to an electric or combustion vehicle.

    An explicit kind wins. Otherwise a vehicle that only ever reports battery
    level is electric and one that only ever reports fuel level is
    combustion. When both or neither are reported, the last ``type`` field
    seen decides.

    Args:
        samples: Normalized sample table.
        explicit: Kind supplied by the caller ("EV" or "ICE"), if known.

    Returns:
        "EV", "ICE", or None if the kind cannot be determined.

    Raises:
        ValueError: If explicit is not a known vehicle kind.
    """
    if explicit is not None:
        if explicit not in (constants.VEHICLE_KIND_ELECTRIC, constants.VEHICLE_KIND_COMBUSTION):
            raise ValueError(f"Unknown vehicle kind: {explicit}")
        return explicit

    if samples.empty:
        return None

    has_battery = bool(samples["battery_level_pct"].notna().any())
    has_fuel = bool(samples["fuel_level_pct"].notna().any())
    if has_battery and not has_fuel:
        return constants.VEHICLE_KIND_ELECTRIC
    if has_fuel and not has_battery:
        return constants.VEHICLE_KIND_COMBUSTION

    declared = samples["vehicle_type"].dropna()
    if declared.empty:
        return None
    return declared.iloc[-1]
