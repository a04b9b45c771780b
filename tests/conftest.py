"""
Shared fixtures and record factories for the fleet series tests.
"""

import pytest

# 2023-11-14T21:00:00Z, aligned to every bucket width in both tables
T0 = 1_699_995_600_000


def make_record(offset_s: float, speed: float = 30.0, emissions: float = 120.0,
                fuel=None, battery=None, vehicle_id: str = "truck-7", vehicle_type=None,
                timestamp=None) -> dict:
    """Raw telemetry record offset_s seconds after T0, shaped like the store's JSON."""
    record = {
        "vehicle_id": vehicle_id,
        "timestamp": timestamp if timestamp is not None else int(T0 + offset_s * 1000),
        "speed": speed,
        "emissions": emissions,
        "location": {"lat": 52.52, "lon": 13.405},
        "status": "active",
    }
    if fuel is not None:
        record["fuel_level"] = fuel
    if battery is not None:
        record["battery_level"] = battery
    if vehicle_type is not None:
        record["type"] = vehicle_type
    return record


@pytest.fixture
def ice_records():
    return [
        make_record(0, speed=40.0, fuel=80.0, vehicle_type="ICE"),
        make_record(1, speed=42.0, vehicle_type="ICE"),
        make_record(2, speed=44.0, vehicle_type="ICE"),
        make_record(30, speed=50.0, fuel=78.0, vehicle_type="ICE"),
        make_record(31, speed=52.0, vehicle_type="ICE"),
    ]


@pytest.fixture
def ev_records():
    return [
        make_record(0, speed=60.0, emissions=150.0, battery=90.0, vehicle_id="van-2"),
        make_record(1, speed=62.0, emissions=150.0, vehicle_id="van-2"),
        make_record(10, speed=64.0, emissions=150.0, battery=89.0, vehicle_id="van-2"),
    ]
