"""Workflow telemetry for CI jobs: step traces, Prometheus metrics and job reports."""

__version__ = "0.3.0"
