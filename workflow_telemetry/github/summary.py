import logging

from workflow_telemetry.config import ReportConfig

logger = logging.getLogger(__name__)


def write_job_summary(config: ReportConfig, content: str) -> bool:
    """Append markdown to the job summary file of the current step."""
    if config.step_summary_path is None:
        logger.warning("GITHUB_STEP_SUMMARY is not set, skipping job summary")
        return False

    try:
        with open(config.step_summary_path, "a", encoding="utf-8") as f:
            f.write(content)
            f.write("\n")
    except OSError as e:
        logger.error(f"Unable to write job summary to {config.step_summary_path}: {e}")
        return False
    return True
