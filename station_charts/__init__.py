"""Sensor time-series storage and incremental chart geometry for a weather station."""

__all__ = ["charting", "ingest", "io", "telemetry", "errors", "units", "render", "station"]
__version__ = "0.1.0"
