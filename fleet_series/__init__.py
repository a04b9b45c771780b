"""Chart-ready series from raw fleet vehicle telemetry."""
