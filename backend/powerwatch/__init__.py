"""PowerWatch — energy meter telemetry ingestion and alerting backend."""

__version__ = "0.1.0"
