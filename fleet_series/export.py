"""
Export Functions for Fleet Telemetry Series

This module exports normalized telemetry samples to CSV. The export always
reads the raw, pre-aggregation samples so it keeps full resolution, never
the bucketed chart series. Cells carry the values exactly as the store
holds them.
"""

import csv
import io
from typing import Optional

import pandas as pd

from . import constants


def export_samples_csv(samples: pd.DataFrame, vehicle_kind: Optional[str] = None) -> str:
    """
    Export normalized samples to CSV format.

    Args:
        samples: Sample table from normalize_samples(), in input order.
        vehicle_kind: "EV" writes 0 for every emissions cell.

    Returns:
        CSV string with header timestamp, speed, fuel_level, battery_level,
        emissions and one row per sample. Missing levels are empty cells.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    # Write header
    writer.writerow(constants.CSV_HEADER)

    electric = vehicle_kind == constants.VEHICLE_KIND_ELECTRIC

    # Write data rows; csv renders None as an empty cell
    for sample in samples.itertuples(index=False):
        writer.writerow([
            sample.raw_timestamp,
            sample.raw_speed,
            sample.raw_fuel_level,
            sample.raw_battery_level,
            0 if electric else sample.raw_emissions,
        ])

    return buffer.getvalue()


def export_filename(vehicle_id: str) -> str:
    """Download filename for a vehicle's raw telemetry export."""
    return f"vehicle_{vehicle_id}_telemetry.csv"
