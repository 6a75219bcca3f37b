from workflow_telemetry.github.client import get_current_job, post_pr_comment
from workflow_telemetry.github.summary import write_job_summary

__all__ = ["get_current_job", "post_pr_comment", "write_job_summary"]
