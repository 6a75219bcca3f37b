"""
Telemetry module for workflow_telemetry.

Reconstructs the step timeline of a CI job and renders it for consumers:

    Job (steps)
    └── reconstruct()            -> [TelemetryEvent, ...]
        ├── serialize_metrics()  -> Prometheus exposition text (pushed via PUT)
        └── generate_trace_chart() -> Mermaid Gantt chart markdown

Usage:
    from workflow_telemetry.telemetry import reconstruct, serialize_metrics

    events = reconstruct(job, marker_dir="/tmp")
    payload = serialize_metrics(job, events, {"team": "infra"}, "success")
"""

from workflow_telemetry.telemetry.events import TelemetryEvent
from workflow_telemetry.telemetry.prometheus import push_metrics, serialize_metrics
from workflow_telemetry.telemetry.steps import reconstruct
from workflow_telemetry.telemetry.timeline import generate_trace_chart

__all__ = [
    "TelemetryEvent",
    "reconstruct",
    "serialize_metrics",
    "push_metrics",
    "generate_trace_chart",
]
