"""
FastAPI Web Application for Fleet Telemetry Series

This module provides a REST API that serves chart-ready telemetry series and
raw-sample CSV exports for the vehicles in the telemetry data directory, and
builds series for records posted directly by a client.
"""

import logging
import time
from collections import OrderedDict
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from fleet_series import analyze_telemetry
from fleet_series import constants


# ============================================================================
# APPLICATION SETUP
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)-30s │ %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Fleet Telemetry Series API")

# Directory the stored-vehicle routes read from; tests point it elsewhere
data_dir: Path = constants.DATA_DIR


# ============================================================================
# RECORD LOADING & CACHING
# ============================================================================

# Least-recently-used cache for built series payloads (request key -> payload)
series_cache: "OrderedDict[Tuple, dict]" = OrderedDict()
cache_size: int = constants.SERIES_CACHE_SIZE


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def load_vehicle_records(vehicle_id: str) -> Tuple[List[Dict], float]:
    """
    Load the raw telemetry records stored for a vehicle.

    Args:
        vehicle_id: Vehicle identifier.

    Returns:
        Tuple of (records, file modification time). The modification time
        serves as the sample-set version for caching.

    Raises:
        HTTPException: 400 for a malformed id, 404 if the vehicle has no
        data file, 500 if the file cannot be parsed.
    """
    try:
        data_file = analyze_telemetry.find_vehicle_file(vehicle_id, data_dir)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if data_file is None:
        raise HTTPException(status_code=404, detail=f"No telemetry for vehicle {vehicle_id}")

    try:
        records = analyze_telemetry.load_telemetry_records(data_file)
    except (OSError, ValueError) as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to load telemetry: {exc}"
        ) from exc

    return records, data_file.stat().st_mtime


def build_payload(records: List[Dict], **kwargs) -> dict:
    """
    Run the series pipeline, mapping contract violations to HTTP 400.

    Args:
        records: Raw telemetry records.
        **kwargs: Passed through to build_series_payload().

    Returns:
        Series payload dictionary.
    """
    try:
        return analyze_telemetry.build_series_payload(records, **kwargs)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


# ============================================================================
# API ROUTES - VEHICLES
# ============================================================================

@app.get("/api/vehicles")
def get_vehicles():
    """
    Get the list of vehicles with stored telemetry.

    Returns:
        List of dictionaries with 'vehicle_id' and 'filename' keys.
    """
    return analyze_telemetry.list_vehicle_datasets(data_dir)


@app.get("/api/vehicles/{vehicle_id}/series")
def get_vehicle_series(
    vehicle_id: str,
    from_: Optional[str] = Query(None, alias="from", description="Window start (ISO-8601)"),
    to: Optional[str] = Query(None, description="Window end (ISO-8601)"),
    bucket_table: str = Query(constants.DEFAULT_BUCKET_TABLE, description="fine or coarse"),
    level_fill: str = Query(constants.DEFAULT_LEVEL_FILL, description="carry or backfill"),
    level_summary: str = Query(constants.DEFAULT_LEVEL_SUMMARY, description="last or mean"),
    vehicle_type: Optional[str] = Query(None, description="EV or ICE, inferred if omitted"),
):
    """
    Get the chart series for a stored vehicle.

    Without window bounds the default trailing window ending now is used.
    Payloads for explicit windows are cached until the vehicle's data file
    changes.

    Returns:
        Series payload with window, bucket width, axis domain and points.
    """
    records, version = load_vehicle_records(vehicle_id)

    cache_key = None
    if from_ is not None or to is not None:
        cache_key = (vehicle_id, from_, to, bucket_table, level_fill, level_summary, vehicle_type, version)
        if cache_key in series_cache:
            logger.info("Series cache hit for vehicle %s", vehicle_id)
            series_cache.move_to_end(cache_key)
            return series_cache[cache_key]

    payload = build_payload(
        records,
        from_value=from_,
        to_value=to,
        vehicle_kind=vehicle_type,
        now_ms=now_ms(),
        bucket_table=bucket_table,
        level_fill=level_fill,
        level_summary=level_summary,
    )
    payload["vehicle_id"] = vehicle_id

    if cache_key is not None:
        series_cache[cache_key] = payload
        while len(series_cache) > cache_size:
            series_cache.popitem(last=False)
    return payload


# ============================================================================
# API ROUTES - AD HOC SERIES
# ============================================================================

class SeriesRequest(BaseModel):
    records: List[dict] = Field(default_factory=list)
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    now: Optional[str] = None
    vehicle_id: Optional[str] = None
    vehicle_type: Optional[str] = None
    bucket_table: str = constants.DEFAULT_BUCKET_TABLE
    level_fill: str = constants.DEFAULT_LEVEL_FILL
    level_summary: str = constants.DEFAULT_LEVEL_SUMMARY


@app.post("/api/series")
def post_series(body: SeriesRequest):
    """
    Build a chart series for records posted in the request body.

    The optional ``now`` field anchors the default trailing window when no
    bounds are given; without it the data span is used.

    Returns:
        Series payload with window, bucket width, axis domain and points.
    """
    reference_ms = None
    if body.now is not None:
        reference_ms = analyze_telemetry.parse_timestamp_ms(body.now)
        if reference_ms is None:
            raise HTTPException(status_code=400, detail=f"Invalid 'now' timestamp: {body.now!r}")

    return build_payload(
        body.records,
        from_value=body.from_,
        to_value=body.to,
        vehicle_id=body.vehicle_id,
        vehicle_kind=body.vehicle_type,
        now_ms=reference_ms,
        bucket_table=body.bucket_table,
        level_fill=body.level_fill,
        level_summary=body.level_summary,
    )


# ============================================================================
# API ROUTES - EXPORT
# ============================================================================

@app.get("/api/vehicles/{vehicle_id}/export.csv")
def export_vehicle_csv(
    vehicle_id: str,
    vehicle_type: Optional[str] = Query(None, description="EV or ICE, inferred if omitted"),
):
    """
    Export a vehicle's raw telemetry samples as CSV.

    The export is built from the normalized raw samples, not from the
    bucketed series, so it keeps full resolution.

    Returns:
        PlainTextResponse: CSV file with Content-Disposition header for
        download. Filename: vehicle_{vehicle_id}_telemetry.csv
    """
    records, _ = load_vehicle_records(vehicle_id)
    try:
        samples = analyze_telemetry.normalize_samples(records)
        kind = analyze_telemetry.infer_vehicle_kind(samples, vehicle_type)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    csv_body = analyze_telemetry.export_samples_csv(samples, kind)
    filename = analyze_telemetry.export_filename(vehicle_id)
    headers = {"Content-Disposition": f"attachment; filename={filename}"}
    return PlainTextResponse(
        csv_body,
        media_type="text/csv",
        headers=headers
    )


# ============================================================================
# RUN INSTRUCTIONS
# ============================================================================
# Run with: uvicorn app:app --reload
