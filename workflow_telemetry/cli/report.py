"""cli command that reports telemetry for the running job"""

import os
import sys
from pathlib import Path

import click

from workflow_telemetry.cli.utils.logging import logger
from workflow_telemetry.config import ReportConfig, parse_extra_labels
from workflow_telemetry.exceptions import ConfigurationError
from workflow_telemetry.report import run_report


@click.command(name="report")
@click.option("--run-id", type=int, default=None, help="Workflow run id.")
@click.option(
    "--repository", type=str, default=None, help="Repository as owner/repo."
)
@click.option(
    "--push-gateway-url",
    type=str,
    default=None,
    help="Prometheus push gateway URL, e.g. http://host:9091/metrics/job/<job-name>",
)
@click.option(
    "--extra-labels",
    type=str,
    default=None,
    help="Extra metric labels as key=value pairs separated by commas.",
)
@click.option(
    "--job-status",
    type=str,
    default=None,
    help="Job status to report, e.g. ${{ job.status }}.",
)
@click.option(
    "--marker-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory with background step markers. Default: /tmp",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="INI file with runner-wide defaults.",
)
@click.option("--job-summary/--no-job-summary", default=None)
@click.option("--comment-on-pr/--no-comment-on-pr", default=None)
def report(
    run_id,
    repository,
    push_gateway_url,
    extra_labels,
    job_status,
    marker_dir,
    config_file,
    job_summary,
    comment_on_pr,
):
    """Report step trace and metrics for the running job."""
    try:
        labels = parse_extra_labels(extra_labels) if extra_labels else None
        config = ReportConfig.from_env(
            os.environ,
            config_file=config_file,
            run_id=run_id,
            repository=repository,
            push_gateway_url=push_gateway_url,
            extra_labels=labels,
            job_status=job_status,
            marker_dir=marker_dir,
            job_summary=job_summary,
            comment_on_pr=comment_on_pr,
        )
    except (ConfigurationError, ValueError) as e:
        logger.error(click.style("[ERROR]", fg="red", bold=True) + f" {e}")
        sys.exit(1)

    logger.info("Finishing ...")
    run_report(config)
