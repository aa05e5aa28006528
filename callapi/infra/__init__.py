"""Infrastructure: telemetry."""
