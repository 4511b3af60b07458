"""Cross-cutting service plumbing (logging, telemetry)."""
