"""
One reporting pass over the current job.

    resolve job -> reconstruct events -> push metrics
                                      -> render step trace -> publish report

Every failure degrades to less telemetry; nothing here fails the CI job.
"""

import logging
from typing import List, Optional

from workflow_telemetry.config import ReportConfig
from workflow_telemetry.github import get_current_job, post_pr_comment, write_job_summary
from workflow_telemetry.model import Job
from workflow_telemetry.telemetry import (
    TelemetryEvent,
    generate_trace_chart,
    push_metrics,
    serialize_metrics,
)
from workflow_telemetry.telemetry.prometheus import is_valid_push_gateway_url
from workflow_telemetry.telemetry.steps import report as report_steps

logger = logging.getLogger(__name__)


def export_metrics(
    config: ReportConfig, job: Job, events: List[TelemetryEvent]
) -> bool:
    """Serialize events and push them if a usable push gateway is configured."""
    if config.push_gateway_url is None:
        logger.debug("No Prometheus Push Gateway configured")
        return False

    if not is_valid_push_gateway_url(config.push_gateway_url):
        logger.error(
            "Prometheus Push Gateway URL must contain the job name. "
            "Please provide the URL in the format: "
            "http(s)://<host>(:<port>)/metrics/job/<job-name>/<labelname1>/<labelvalue1>/..."
        )
        logger.error("Skipping reporting metrics to Prometheus Push Gateway")
        return False

    payload = serialize_metrics(job, events, config.extra_labels, config.job_status)
    logger.debug(f"Prometheus payload:\n{payload}")
    return push_metrics(config.push_gateway_url, payload)


def build_report(config: ReportConfig, job: Job, content: str) -> str:
    """Wrap report sections with a title and links to the commit and the job."""
    repo_url = f"{config.server_url}/{config.repository}"
    job_url = f"{repo_url}/runs/{job.id}?check_suite_focus=true"
    commit_url = f"{repo_url}/commit/{config.commit}"

    title = f"## Workflow Telemetry - {config.workflow} / {job.name}"
    info = (
        f"Workflow telemetry for commit [{config.commit}]({commit_url})\n"
        f"You can access workflow job details [here]({job_url})"
    )
    return "\n".join([title, info, content])


def publish_report(config: ReportConfig, job: Job, content: str) -> None:
    logger.info("Reporting all content ...")
    post_content = build_report(config, job, content)

    if config.job_summary:
        write_job_summary(config, post_content)

    if config.comment_on_pr and config.pull_request is not None:
        post_pr_comment(config, post_content)
    else:
        logger.debug("Not commenting on a Pull Request")

    logger.info("Reporting all content completed")


def run_report(config: ReportConfig, job: Optional[Job] = None) -> Optional[str]:
    """Run one reporting pass.

    Args:
        config: Reporting configuration
        job: Job snapshot; resolved through the GitHub API when omitted

    Returns:
        The published report content, or None if nothing was reported
    """
    try:
        if job is None:
            job = get_current_job(config)
        if job is None:
            logger.error("Couldn't find current job. So action will not report any data.")
            return None

        events = report_steps(job, config.marker_dir)

        sections = []
        if events is not None:
            export_metrics(config, job, events)
            sections.append(generate_trace_chart(job.name, events))

        content = "".join(f"{section}\n" for section in sections)
        publish_report(config, job, content)

        logger.info("Finish completed")
        return content
    except Exception as e:
        logger.error(f"Unable to report workflow telemetry: {e}")
        return None
