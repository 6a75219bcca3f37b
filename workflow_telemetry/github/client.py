"""GitHub REST API access: resolving the running job and commenting on PRs."""

import logging
import time
from typing import Dict, Optional

import requests

from workflow_telemetry.config import ReportConfig
from workflow_telemetry.constants import (
    API_TIMEOUT,
    JOB_LOOKUP_ATTEMPTS,
    JOB_LOOKUP_BACKOFF,
    JOBS_PAGE_SIZE,
)
from workflow_telemetry.model import Job

logger = logging.getLogger(__name__)


# https://docs.github.com/en/rest/actions/workflow-jobs#list-jobs-for-a-workflow-run
def _headers(config: ReportConfig) -> Dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if config.token:
        headers["Authorization"] = f"Bearer {config.token}"
    return headers


def find_current_job(config: ReportConfig) -> Optional[Job]:
    """Single pass over the jobs of the run, looking for ours.

    Ours is the in-progress job running on this runner.
    """
    url = f"{config.api_url}/repos/{config.repository}/actions/runs/{config.run_id}/jobs"
    page = 1
    while True:
        response = requests.get(
            url,
            headers=_headers(config),
            params={"per_page": JOBS_PAGE_SIZE, "page": page},
            timeout=API_TIMEOUT,
        )
        response.raise_for_status()
        jobs = response.json().get("jobs") or []
        if not jobs:
            return None

        for job in jobs:
            if (
                job.get("status") == "in_progress"
                and job.get("runner_name") == config.runner_name
            ):
                return Job.model_validate(job)

        # A short page is the last one
        if len(jobs) < JOBS_PAGE_SIZE:
            return None
        page += 1


def get_current_job(
    config: ReportConfig,
    attempts: int = JOB_LOOKUP_ATTEMPTS,
    backoff: float = JOB_LOOKUP_BACKOFF,
) -> Optional[Job]:
    """Resolve the running job, retrying while the API has not caught up.

    Returns None if the job could not be found; callers then report nothing.
    """
    try:
        for attempt in range(attempts):
            job = find_current_job(config)
            if job is not None:
                return job
            logger.debug(f"Current job not found yet (attempt {attempt + 1})")
            if attempt + 1 < attempts:
                time.sleep(backoff)
    except requests.RequestException as e:
        logger.error(
            "Unable to get current workflow job info. "
            f'Please make sure that your workflow has "actions:read" permission! ({e})'
        )
    return None


def post_pr_comment(config: ReportConfig, body: str) -> bool:
    """Post a comment to the pull request that triggered the run."""
    if config.pull_request is None:
        logger.debug("Couldn't find Pull Request")
        return False

    url = (
        f"{config.api_url}/repos/{config.repository}"
        f"/issues/{config.pull_request.number}/comments"
    )
    try:
        response = requests.post(
            url, headers=_headers(config), json={"body": body}, timeout=API_TIMEOUT
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Unable to comment on pull request: {e}")
        return False
    return True
