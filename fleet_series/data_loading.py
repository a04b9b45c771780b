"""
Data Loading for Fleet Telemetry Series

This module reads raw telemetry records exported from the telemetry store.
Each vehicle's records live in one file in the data directory, named after
the vehicle: ``<vehicle_id>.json`` (a JSON array) or ``<vehicle_id>.jsonl``
(one JSON object per line).
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from . import constants

logger = logging.getLogger(__name__)

DATA_SUFFIXES = (".json", ".jsonl")


def load_telemetry_records(file_path: Path) -> List[Dict]:
    """
    Load raw telemetry records from a JSON or JSON-lines file.

    Blank lines in JSON-lines files are skipped.

    Args:
        file_path: Path to a .json or .jsonl file.

    Returns:
        List of raw record dictionaries, in file order.

    Raises:
        ValueError: If the file content is not valid JSON, or a .json file
            does not hold an array.
    """
    file_path = Path(file_path)

    with file_path.open("r", encoding="utf-8") as file:
        if file_path.suffix == ".jsonl":
            records = []
            for line_number, line in enumerate(file, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    records.append(json.loads(line))
                except json.JSONDecodeError as exc:
                    raise ValueError(f"{file_path.name}:{line_number}: {exc.msg}") from exc
            return records

        try:
            records = json.load(file)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{file_path.name}: {exc.msg}") from exc

    if not isinstance(records, list):
        raise ValueError(f"{file_path.name}: expected a JSON array of telemetry records")
    return records


def find_vehicle_file(vehicle_id: str, data_dir: Path = constants.DATA_DIR) -> Optional[Path]:
    """
    Locate the data file for a vehicle.

    Args:
        vehicle_id: Vehicle identifier (the file stem).
        data_dir: Directory holding the telemetry files.

    Returns:
        Path to the vehicle's file, or None if no file exists.

    Raises:
        ValueError: If vehicle_id is not a plain file stem.
    """
    if not vehicle_id or Path(vehicle_id).name != vehicle_id or vehicle_id.startswith("."):
        raise ValueError(f"Invalid vehicle id: {vehicle_id!r}")

    for suffix in DATA_SUFFIXES:
        candidate = Path(data_dir) / f"{vehicle_id}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def list_vehicle_datasets(data_dir: Path = constants.DATA_DIR) -> List[Dict]:
    """
    Discover the vehicles that have telemetry files.

    Args:
        data_dir: Directory holding the telemetry files.

    Returns:
        List of dictionaries with 'vehicle_id' and 'filename' keys, sorted
        by vehicle id. Empty if the directory does not exist.
    """
    data_dir = Path(data_dir)
    if not data_dir.exists():
        logger.info("Telemetry data directory %s does not exist", data_dir)
        return []

    datasets = {}
    for file_path in sorted(data_dir.iterdir()):
        if file_path.suffix not in DATA_SUFFIXES or not file_path.is_file():
            continue
        datasets.setdefault(file_path.stem, {
            "vehicle_id": file_path.stem,
            "filename": file_path.name,
        })

    return [datasets[key] for key in sorted(datasets)]
