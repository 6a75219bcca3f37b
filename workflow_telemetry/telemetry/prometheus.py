"""
Prometheus exposition for job and step telemetry.

Every family is a gauge. `# TYPE`/`# HELP` blocks are written once at the top
of the document, followed by the job samples and then the step samples.

Job lines carry `head_sha` and `job_conclusion` plus the extra labels; step
lines add `step_name` and `step_conclusion` in front of those. Fixed labels
take precedence: an extra label reusing a fixed name is dropped.
"""

import logging
from typing import List, Mapping, Optional, Tuple

import requests

from workflow_telemetry.constants import (
    EXPOSITION_CONTENT_TYPE,
    METRIC_PREFIX,
    PUSH_GATEWAY_JOB_SEGMENT,
    PUSH_GATEWAY_TIMEOUT,
    SUCCESS_CONCLUSION,
)
from workflow_telemetry.exceptions import PushGatewayError
from workflow_telemetry.model import Job
from workflow_telemetry.telemetry.events import TelemetryEvent
from workflow_telemetry.utils import format_number

logger = logging.getLogger(__name__)

JOB_METRICS: List[Tuple[str, str]] = [
    ("job_start_time_seconds", "Start time of the job in seconds since the epoch"),
    ("job_end_time_seconds", "End time of the job in seconds since the epoch"),
    ("job_duration_seconds", "Elapsed time for the job in seconds"),
    ("job_conclusion", "Conclusion of the job. 1 for success, 0 for failure"),
]

STEP_METRICS: List[Tuple[str, str]] = [
    ("step_start_time_seconds", "Start time of the step in seconds since the epoch"),
    ("step_end_time_seconds", "End time of the step in seconds since the epoch"),
    ("step_duration_seconds", "Elapsed time for the step in seconds"),
    (
        "step_duration_since_job_start_seconds",
        "Elapsed time from the start of the job to the end of the step in seconds",
    ),
    ("step_conclusion", "Conclusion of the step. 1 for success, 0 for failure"),
]

Labels = List[Tuple[str, str]]


def escape_label_value(value: str) -> str:
    return value.replace('"', '\\"')


def format_labels(labels: Labels) -> str:
    return ",".join(f'{key}="{escape_label_value(value)}"' for key, value in labels)


def format_sample(name: str, labels: Labels, value) -> str:
    return f"{METRIC_PREFIX}{name}{{{format_labels(labels)}}} {format_number(value)}"


STEP_LABEL_NAMES = ("step_name", "step_conclusion")


def merge_labels(
    fixed: Labels,
    extra: Optional[Mapping[str, str]],
    reserved: Tuple[str, ...] = (),
) -> Labels:
    """Append extra labels to a fixed label set.

    Fixed names, and the `reserved` names added later by the caller, always win.
    """
    merged = list(fixed)
    taken = {key for key, _ in fixed} | set(reserved)
    for key, value in (extra or {}).items():
        if key in taken:
            logger.warning(
                f"Ignoring extra label {key}={value!r}: {key} is a reserved label"
            )
            continue
        merged.append((key, str(value)))
        taken.add(key)
    return merged


def _header_lines(metrics: List[Tuple[str, str]]) -> List[str]:
    lines = []
    for name, description in metrics:
        lines.append(f"# TYPE {METRIC_PREFIX}{name} gauge")
        lines.append(f"# HELP {METRIC_PREFIX}{name} {description}")
        lines.append("")
    return lines


def serialize_metrics(
    job: Job,
    events: List[TelemetryEvent],
    extra_labels: Optional[Mapping[str, str]] = None,
    job_status: str = "",
) -> str:
    """Render job and step telemetry as a Prometheus exposition document.

    Args:
        job: The job the events belong to; only `head_sha` is used
        events: Telemetry events in execution order
        extra_labels: Static labels added to every sample
        job_status: Job outcome as known by the caller. The platform has not
            recorded the final conclusion yet while the job is still running.

    Returns:
        The exposition text, newline terminated
    """
    job_labels = merge_labels(
        [("head_sha", job.head_sha), ("job_conclusion", job_status)],
        extra_labels,
        reserved=STEP_LABEL_NAMES,
    )

    lines: List[str] = []
    lines.extend(_header_lines(JOB_METRICS))
    lines.extend(_header_lines(STEP_METRICS))

    if events:
        job_start = events[0].start_seconds
        job_end = events[-1].end_seconds
        lines.append(format_sample("job_start_time_seconds", job_labels, job_start))
        lines.append(format_sample("job_end_time_seconds", job_labels, job_end))
        lines.append(
            format_sample(
                "job_duration_seconds",
                job_labels,
                (events[-1].end_time - events[0].start_time).total_seconds(),
            )
        )
    lines.append(
        format_sample(
            "job_conclusion",
            job_labels,
            1 if job_status == SUCCESS_CONCLUSION else 0,
        )
    )

    if events:
        lines.append("")
    for event in events:
        step_labels = [
            ("step_name", event.name),
            ("step_conclusion", event.conclusion),
        ] + job_labels
        lines.append(
            format_sample("step_start_time_seconds", step_labels, event.start_seconds)
        )
        lines.append(
            format_sample("step_end_time_seconds", step_labels, event.end_seconds)
        )
        lines.append(
            format_sample(
                "step_duration_seconds", step_labels, event.duration_seconds
            )
        )
        lines.append(
            format_sample(
                "step_duration_since_job_start_seconds",
                step_labels,
                (event.end_time - events[0].start_time).total_seconds(),
            )
        )
        lines.append(
            format_sample(
                "step_conclusion",
                step_labels,
                1 if event.conclusion == SUCCESS_CONCLUSION else 0,
            )
        )

    return "\n".join(lines) + "\n"


def is_valid_push_gateway_url(url: Optional[str]) -> bool:
    """A usable URL already names the grouping key, i.e. contains `/job/`."""
    return bool(url) and PUSH_GATEWAY_JOB_SEGMENT in url


def push_metrics(
    url: str, payload: str, timeout: float = PUSH_GATEWAY_TIMEOUT
) -> bool:
    """PUT an exposition payload to a push gateway.

    Failures are logged and reported through the return value.
    """
    logger.info(
        f"Reporting metrics to Prometheus Push Gateway (prometheusPushGatewayUrl={url})"
    )
    try:
        response = requests.put(
            url,
            data=payload.encode("utf-8"),
            headers={"Content-Type": EXPOSITION_CONTENT_TYPE},
            timeout=timeout,
        )
        if not 200 <= response.status_code < 300:
            raise PushGatewayError(url, response.status_code, response.reason or "")
    except (requests.RequestException, PushGatewayError) as e:
        logger.error(f"Unable to report metrics to Prometheus Push Gateway: {e}")
        return False

    logger.info(
        f"Reported metrics to Prometheus Push Gateway: "
        f"{response.status_code} - {response.reason}"
    )
    return True
