"""
Step reconstruction.

Turns the raw step list of a job into an ordered list of TelemetryEvents.

Background work is launched by a step named `<X> (background)` and joined
later by a step named `Attach "<X>" and wait for completion`. The attach
step's own timestamps only cover the join, so its interval is rebuilt from
the paired background step and from the sidecar markers the background work
wrote (`<marker_dir>/<X>.started_at`, `<marker_dir>/<X>.completed_at`).
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from workflow_telemetry.constants import (
    ATTACH_STEP_PATTERN,
    BACKGROUND_STEP_SUFFIX,
    DEFAULT_MARKER_DIR,
    SKIPPED_CONCLUSION,
    UNKNOWN_CONCLUSION,
)
from workflow_telemetry.model import Job, Step
from workflow_telemetry.telemetry.events import TelemetryEvent
from workflow_telemetry.telemetry.markers import read_completed_at, read_started_at

logger = logging.getLogger(__name__)

# Anchored and case-sensitive: ordinary steps mentioning "Attach" must not match
_ATTACH_STEP_RE = re.compile(ATTACH_STEP_PATTERN)


def match_attach_step(name: str) -> Optional[str]:
    """Return the background step name joined by an attach step, if any."""
    match = _ATTACH_STEP_RE.fullmatch(name)
    return match.group(1) if match else None


def partition_steps(steps: List[Step]) -> Tuple[List[Step], Dict[str, Step]]:
    """Split steps into foreground steps and a name-keyed background pool.

    The first background step wins when several share a name.
    """
    foreground = []
    background: Dict[str, Step] = {}
    for step in steps:
        if step.is_background():
            background.setdefault(step.name, step)
        else:
            foreground.append(step)
    return foreground, background


def _resolve_attach_interval(
    step: Step,
    background_name: str,
    background: Dict[str, Step],
    marker_dir: Union[str, Path],
):
    starting_step = background.get(f"{background_name} {BACKGROUND_STEP_SUFFIX}")
    if starting_step is not None:
        started_at = read_started_at(marker_dir, background_name)
        if started_at is None:
            logger.info(
                f"Leaving started_at of {background_name} as when the step started "
                "in the background"
            )
            started_at = starting_step.started_at
    else:
        # Under-reports the duration; the best available approximation
        logger.info(
            f"Unable to find starting step for background step: {background_name}. "
            "Leaving started_at as when the attach step finished"
        )
        started_at = step.completed_at

    completed_at = read_completed_at(marker_dir, background_name)
    if completed_at is None:
        logger.info(
            f"Leaving completed_at of {background_name} as when the attach step finished"
        )
        completed_at = step.completed_at

    return started_at, completed_at


def reconstruct(
    job: Job, marker_dir: Union[str, Path] = DEFAULT_MARKER_DIR
) -> List[TelemetryEvent]:
    """Build the ordered telemetry events of a job.

    Args:
        job: Job snapshot with its steps in execution order
        marker_dir: Directory holding sidecar markers of background steps

    Returns:
        One event per foreground step that was not skipped and whose start and
        end could be resolved, in the order of the foreground steps.
    """
    foreground, background = partition_steps(job.steps)
    events = []

    for step in foreground:
        logger.debug(f"Step: {step.name} - {step.conclusion}")
        if step.conclusion == SKIPPED_CONCLUSION:
            continue

        name = step.name
        started_at, completed_at = step.started_at, step.completed_at

        background_name = match_attach_step(step.name)
        if background_name is not None:
            logger.debug(f"Found background step: {background_name}")
            name = background_name
            started_at, completed_at = _resolve_attach_interval(
                step, background_name, background, marker_dir
            )

        if started_at is None or completed_at is None:
            logger.debug(f"Skipping step without start or end time: {name}")
            continue

        events.append(
            TelemetryEvent(
                number=step.number,
                name=name,
                conclusion=step.conclusion or UNKNOWN_CONCLUSION,
                start_time=started_at,
                end_time=completed_at,
            )
        )

    return events


def report(
    job: Optional[Job], marker_dir: Union[str, Path] = DEFAULT_MARKER_DIR
) -> Optional[List[TelemetryEvent]]:
    """Reconstruct events for a job, returning None if there is no telemetry."""
    logger.info("Reporting step tracer result ...")

    if job is None:
        return None

    try:
        events = reconstruct(job, marker_dir)
    except Exception as e:
        logger.error(f"Unable to report step tracer result: {e}")
        return None

    logger.info("Reported step tracer result")
    return events
