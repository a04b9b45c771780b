"""
Build a chart series for one vehicle's telemetry file.

This script runs the series pipeline over a JSON or JSON-lines telemetry
dump and prints a short summary, optionally writing the series payload as
JSON and the raw samples as CSV.

Usage:
    python3 build_series.py --data-file "Telemetry Data/truck-7.jsonl"
    python3 build_series.py --data-file truck-7.json --from 2024-05-01T00:00:00Z --to 2024-05-02T00:00:00Z
    python3 build_series.py --data-file truck-7.json --bucket-table coarse --output series.json --csv raw.csv
"""

import argparse
import json
import sys
from pathlib import Path

from fleet_series import analyze_telemetry
from fleet_series import constants


def print_summary(payload: dict) -> None:
    """
    Print a summary of a series payload.

    Args:
        payload: Payload from build_series_payload().
    """
    print(f"\n{'='*70}")
    print(f"Vehicle kind: {payload['vehicle_kind'] or 'unknown'}")
    print(f"Valid samples: {payload['sample_count']}")
    window = payload["window"]
    if window:
        print(f"Window: {window['from']} -> {window['to']}")
    else:
        print("Window: none (no data)")
    print(f"Bucket width: {payload['bucket_ms'] / 1000:g} s")
    print(f"Points: {len(payload['points'])}")
    print(f"{'='*70}")

    if not payload["has_data"]:
        print("No data in window.")
        return

    header = f"{'Timestamp':<27} {'Speed avg':>10} {'Speed min':>10} {'Fuel %':>8} {'Batt %':>8} {'Emis':>8}"
    print(header)
    print("-" * len(header))

    def cell(value):
        return "-" if value is None else f"{value:.1f}"

    for point in payload["points"]:
        print(
            f"{point['timestamp']:<27} {cell(point['speed_avg']):>10} {cell(point['speed_min']):>10} "
            f"{cell(point['fuel_pct']):>8} {cell(point['battery_pct']):>8} {cell(point['emissions_avg']):>8}"
        )


def main():
    parser = argparse.ArgumentParser(
        description="Build a chart-ready telemetry series for one vehicle"
    )
    parser.add_argument("--data-file", type=Path, required=True, help="JSON or JSON-lines telemetry file")
    parser.add_argument("--from", dest="from_value", help="Window start (ISO-8601)")
    parser.add_argument("--to", dest="to_value", help="Window end (ISO-8601)")
    parser.add_argument("--vehicle-type", choices=[constants.VEHICLE_KIND_ELECTRIC, constants.VEHICLE_KIND_COMBUSTION],
                        help="Vehicle kind; inferred from the data if omitted")
    parser.add_argument("--bucket-table", default=constants.DEFAULT_BUCKET_TABLE,
                        choices=sorted(constants.BUCKET_TABLES))
    parser.add_argument("--level-fill", default=constants.DEFAULT_LEVEL_FILL,
                        choices=constants.LEVEL_FILL_POLICIES)
    parser.add_argument("--level-summary", default=constants.DEFAULT_LEVEL_SUMMARY,
                        choices=constants.LEVEL_SUMMARY_POLICIES)
    parser.add_argument("--output", type=Path, help="Write the series payload to this JSON file")
    parser.add_argument("--csv", type=Path, help="Write the raw samples to this CSV file")

    args = parser.parse_args()

    if not args.data_file.exists():
        print(f"Error: Data file not found: {args.data_file}")
        sys.exit(1)

    try:
        records = analyze_telemetry.load_telemetry_records(args.data_file)
        payload = analyze_telemetry.build_series_payload(
            records,
            from_value=args.from_value,
            to_value=args.to_value,
            vehicle_kind=args.vehicle_type,
            bucket_table=args.bucket_table,
            level_fill=args.level_fill,
            level_summary=args.level_summary,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print_summary(payload)

    if args.output:
        args.output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Saved series to: {args.output}")

    if args.csv:
        samples = analyze_telemetry.normalize_samples(records)
        kind = analyze_telemetry.infer_vehicle_kind(samples, args.vehicle_type)
        args.csv.write_text(analyze_telemetry.export_samples_csv(samples, kind), encoding="utf-8")
        print(f"Saved raw samples to: {args.csv}")


if __name__ == "__main__":
    main()
