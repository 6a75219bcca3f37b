"""Mermaid Gantt chart generation for step traces."""

from typing import List

from workflow_telemetry.constants import (
    FAILURE_CONCLUSION,
    SETUP_JOB_STEP_NAME,
    SKIPPED_CONCLUSION,
    STEP_TRACE_HEADING,
)
from workflow_telemetry.telemetry.events import TelemetryEvent


class GanttChartGenerator:
    """Generates a Mermaid Gantt chart with one row per telemetry event.

    Example output:

        gantt
        	title Build
        	dateFormat x
        	axisFormat %H:%M:%S
        	Set up job : milestone, 1658073446000, 1658073450000
        	Run actions/checkout@v2 : 1658073451000, 1658073453000
        	Run invalid command : crit, 1658073655000, 1658073654000
    """

    def __init__(self, job_name: str, events: List[TelemetryEvent]):
        self.job_name = job_name
        self.events = events

    def generate_chart(self) -> str:
        """Generate the Gantt chart body, without the surrounding code fence."""
        chart_lines = [
            "gantt",
            f"\ttitle {self.job_name}",
            "\tdateFormat x",
            "\taxisFormat %H:%M:%S",
        ]
        chart_lines.extend(self._generate_row(event) for event in self.events)
        return "\n".join(chart_lines)

    def _generate_row(self, event: TelemetryEvent) -> str:
        # ':' separates the row label from its fields
        row = [f"\t{event.name.replace(':', '-')} : "]
        row.extend(f"{tag}, " for tag in self._row_tags(event))

        start_ms, end_ms = event.start_ms, event.end_ms
        # Inverted intervals stay visible as zero-width rows at their end time
        row.append(f"{min(start_ms, end_ms)}, {end_ms}")
        return "".join(row)

    def _row_tags(self, event: TelemetryEvent) -> List[str]:
        tags = []
        if event.name == SETUP_JOB_STEP_NAME and event.number == 1:
            tags.append("milestone")
        if event.conclusion == FAILURE_CONCLUSION:
            tags.append("crit")
        elif event.conclusion == SKIPPED_CONCLUSION:
            tags.append("done")
        return tags


def generate_trace_chart(job_name: str, events: List[TelemetryEvent]) -> str:
    """Generate the step trace section of a job report.

    Args:
        job_name: Title of the chart
        events: Telemetry events in execution order

    Returns:
        Markdown with a `### Step Trace` heading and a fenced mermaid chart
    """
    chart = GanttChartGenerator(job_name, events).generate_chart()
    return "\n".join(["", STEP_TRACE_HEADING, "", f"```mermaid\n{chart}\n```"])
