"""
Fleet Telemetry Series Module

This module turns raw, irregularly-sampled vehicle telemetry into bounded,
gap-aware, chart-ready series over a selectable time window.

This file serves as the public entry layer that imports and re-exports the
functions of the individual pipeline modules.
"""

# Import constants
from .constants import (
    DATA_DIR,
    GAP_THRESHOLD_MS,
    BUCKET_TABLES,
    DEFAULT_WINDOW_MS,
    VEHICLE_KIND_ELECTRIC,
    VEHICLE_KIND_COMBUSTION,
)

# Import utility functions
from .utils import (
    safe_float,
    round_float,
    clamp_pct,
    parse_timestamp_ms,
    ms_to_iso,
)

# Import data loading functions
from .data_loading import (
    load_telemetry_records,
    find_vehicle_file,
    list_vehicle_datasets,
)

# Import normalization functions
from .normalizer import (
    normalize_samples,
    infer_vehicle_kind,
)

# Import time series functions
from .time_series import (
    collapse_to_seconds,
    insert_gap_breaks,
    filter_to_window,
)

# Import bucketing functions
from .bucketing import (
    select_bucket_width,
    bucket_key,
    assign_buckets,
)

# Import aggregation functions
from .aggregation import (
    aggregate_buckets,
)

# Import imputation functions
from .imputation import (
    fill_levels,
)

# Import domain functions
from .domain import (
    TimeWindow,
    AxisDomain,
    parse_window_bounds,
    resolve_window,
    build_axis_domain,
    format_tick,
)

# Import export functions
from .export import (
    export_samples_csv,
    export_filename,
)

# Import series builder functions
from .session import (
    build_row_stream,
    aggregate_series,
    build_series_payload,
)

__all__ = [
    # Constants
    "DATA_DIR",
    "GAP_THRESHOLD_MS",
    "BUCKET_TABLES",
    "DEFAULT_WINDOW_MS",
    "VEHICLE_KIND_ELECTRIC",
    "VEHICLE_KIND_COMBUSTION",
    # Utilities
    "safe_float",
    "round_float",
    "clamp_pct",
    "parse_timestamp_ms",
    "ms_to_iso",
    # Data loading
    "load_telemetry_records",
    "find_vehicle_file",
    "list_vehicle_datasets",
    # Normalization
    "normalize_samples",
    "infer_vehicle_kind",
    # Time series
    "collapse_to_seconds",
    "insert_gap_breaks",
    "filter_to_window",
    # Bucketing
    "select_bucket_width",
    "bucket_key",
    "assign_buckets",
    # Aggregation
    "aggregate_buckets",
    # Imputation
    "fill_levels",
    # Domain
    "TimeWindow",
    "AxisDomain",
    "parse_window_bounds",
    "resolve_window",
    "build_axis_domain",
    "format_tick",
    # Export
    "export_samples_csv",
    "export_filename",
    # Series builder
    "aggregate_series",
    "build_row_stream",
    "build_series_payload",
]
