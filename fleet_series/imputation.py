"""
Level Imputation for Fleet Telemetry Series

Fuel and battery levels are reported far less often than speed. This module
carries the last known level forward into buckets without a reading so the
level chart is continuous.
"""

from typing import Dict, List, Optional

import pandas as pd

from . import constants
from . import utils

LEVEL_FIELDS = {
    constants.VEHICLE_KIND_ELECTRIC: "battery_pct",
    constants.VEHICLE_KIND_COMBUSTION: "fuel_pct",
}


def fill_levels(points: List[Dict], vehicle_kind: Optional[str],
                policy: str = constants.DEFAULT_LEVEL_FILL) -> List[Dict]:
    """
    Forward-fill the level field matching the vehicle kind.

    Buckets before the first reading stay None under the "carry" policy.
    The "backfill" policy additionally seeds them with the first reading.

    Args:
        points: Output points from aggregate_buckets(), ascending by ts_ms.
        vehicle_kind: "EV" fills battery_pct, "ICE" fills fuel_pct, None
            fills nothing.
        policy: "carry" or "backfill".

    Returns:
        New list of new point dictionaries; the input is left untouched.

    Raises:
        ValueError: If policy is not a known fill policy.
    """
    if policy not in constants.LEVEL_FILL_POLICIES:
        raise ValueError(f"Unknown level fill policy {policy!r}; expected one of {constants.LEVEL_FILL_POLICIES}")

    filled = [dict(point) for point in points]
    field = LEVEL_FIELDS.get(vehicle_kind)
    if field is None or not filled:
        return filled

    levels = pd.Series([point[field] for point in filled], dtype=float).ffill()
    if policy == "backfill":
        levels = levels.bfill()

    for point, level in zip(filled, levels):
        point[field] = utils.none_if_nan(level)

    return filled
