"""Pydantic models for CI jobs and their steps."""

from workflow_telemetry.model.job import Job, Step

__all__ = ["Job", "Step"]
