"""Command line client for the irrigation telemetry API."""
