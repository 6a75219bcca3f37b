"""Reporting configuration, built once from the GitHub Actions environment.

Nothing below the reporting boundary reads process state: `ReportConfig.from_env`
collects everything the core needs and the resulting object is passed down.

Runner-wide defaults (e.g. a shared push gateway) can be placed in an INI file:

    [prometheus]
    push_gateway_url = http://pushgateway:9091/metrics/job/ci
    extra_labels = team=infra,runner_pool=large
"""

import configparser
import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from workflow_telemetry.constants import (
    DEFAULT_API_URL,
    DEFAULT_MARKER_DIR,
    DEFAULT_SERVER_URL,
)
from workflow_telemetry.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

APP_NAME = "workflow_telemetry"

_LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")
_TRUE_VALUES = {"true", "1", "yes", "on"}


def parse_extra_labels(text: Optional[str]) -> Dict[str, str]:
    """Parse `key=value` pairs separated by commas or newlines.

    >>> parse_extra_labels("team=infra, pool=large")
    {'team': 'infra', 'pool': 'large'}
    """
    labels: Dict[str, str] = {}
    if not text:
        return labels
    for entry in re.split(r"[,\n]", text):
        entry = entry.strip()
        if not entry:
            continue
        if "=" not in entry:
            raise ValueError(f"Expected key=value in extra labels, got {entry!r}")
        key, value = entry.split("=", 1)
        labels[key.strip()] = value.strip()
    return labels


def parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


class PullRequest(BaseModel):
    number: int
    head_sha: Optional[str] = None


class ReportConfig(BaseModel):
    """Everything a reporting pass needs to know about its environment."""

    repository: str = Field(..., description="owner/repo")
    run_id: int = Field(..., description="Workflow run id")
    sha: str = Field("", description="Commit the workflow runs on")
    workflow: str = ""
    runner_name: Optional[str] = None
    token: Optional[str] = Field(None, repr=False)
    api_url: str = DEFAULT_API_URL
    server_url: str = DEFAULT_SERVER_URL
    pull_request: Optional[PullRequest] = None
    step_summary_path: Optional[Path] = None
    marker_dir: Path = Path(DEFAULT_MARKER_DIR)
    push_gateway_url: Optional[str] = None
    extra_labels: Dict[str, str] = Field(default_factory=dict)
    job_status: str = ""
    job_summary: bool = True
    comment_on_pr: bool = False

    @field_validator("repository")
    @classmethod
    def validate_repository(cls, v: str) -> str:
        if v.count("/") != 1 or v.startswith("/") or v.endswith("/"):
            raise ValueError(f"Repository must look like owner/repo, got {v!r}")
        return v

    @field_validator("extra_labels")
    @classmethod
    def validate_label_names(cls, v: Dict[str, str]) -> Dict[str, str]:
        for key in v:
            if not _LABEL_NAME_RE.match(key):
                raise ValueError(f"Invalid Prometheus label name: {key!r}")
        return v

    @field_validator("push_gateway_url")
    @classmethod
    def empty_url_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def commit(self) -> str:
        """The commit to report: the PR head when running for a pull request."""
        if self.pull_request and self.pull_request.head_sha:
            return self.pull_request.head_sha
        return self.sha

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str],
        config_file: Optional[Path] = None,
        **overrides: Any,
    ) -> "ReportConfig":
        """Build a configuration from GitHub Actions variables and action inputs.

        Args:
            environ: Process environment, e.g. `os.environ`
            config_file: Optional INI file with runner-wide defaults
            **overrides: Values taking precedence over the environment; None is ignored

        Raises:
            ConfigurationError: if a required variable is missing or invalid
        """
        defaults = ConfigAccessor(config_file) if config_file else None

        def _input(name: str) -> Optional[str]:
            return environ.get(f"INPUT_{name.upper()}")

        push_gateway_url = _input("prometheus_push_gateway_url")
        extra_labels = _input("prometheus_extra_labels")
        if defaults is not None:
            push_gateway_url = push_gateway_url or defaults.get(
                "prometheus", "push_gateway_url"
            )
            extra_labels = extra_labels or defaults.get("prometheus", "extra_labels")

        try:
            labels = parse_extra_labels(extra_labels)
        except ValueError as e:
            raise ConfigurationError(str(e), "prometheus_extra_labels")

        values: Dict[str, Any] = {
            "repository": environ.get("GITHUB_REPOSITORY"),
            "run_id": environ.get("GITHUB_RUN_ID"),
            "sha": environ.get("GITHUB_SHA", ""),
            "workflow": environ.get("GITHUB_WORKFLOW", ""),
            "runner_name": environ.get("RUNNER_NAME"),
            "token": _input("github_token") or environ.get("GITHUB_TOKEN"),
            "api_url": environ.get("GITHUB_API_URL") or DEFAULT_API_URL,
            "server_url": environ.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL,
            "pull_request": read_pull_request(environ.get("GITHUB_EVENT_PATH")),
            "step_summary_path": environ.get("GITHUB_STEP_SUMMARY") or None,
            "marker_dir": _input("marker_dir") or DEFAULT_MARKER_DIR,
            "push_gateway_url": push_gateway_url,
            "extra_labels": labels,
            "job_status": _input("job_status") or "",
            "job_summary": parse_bool(_input("job_summary"), default=True),
            "comment_on_pr": parse_bool(_input("comment_on_pr")),
        }

        values.update({k: v for k, v in overrides.items() if v is not None})
        for required, variable in (
            ("repository", "GITHUB_REPOSITORY"),
            ("run_id", "GITHUB_RUN_ID"),
        ):
            if not values.get(required):
                raise ConfigurationError("variable is not set", variable)

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(str(e))


def read_pull_request(event_path: Optional[str]) -> Optional[PullRequest]:
    """Extract the pull request of the triggering event, if there is one."""
    if not event_path:
        return None
    try:
        with open(event_path, encoding="utf-8") as f:
            event = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read event payload {event_path}: {e}")
        return None

    pull_request = event.get("pull_request") if isinstance(event, dict) else None
    if not pull_request or "number" not in pull_request:
        return None
    return PullRequest(
        number=pull_request["number"],
        head_sha=(pull_request.get("head") or {}).get("sha"),
    )


class ConfigAccessor:
    """
    A dict-like accessor for INI configuration files.

    Missing files, sections or keys are handled gracefully.

    Usage:
        config = ConfigAccessor(Path("/etc/workflow_telemetry.cfg"))
        value = config.get('prometheus', 'push_gateway_url', default=None)
    """

    def __init__(self, config_path: Path):
        self.config_path = Path(config_path)
        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            try:
                self.config.read(self.config_path, encoding="utf-8")
            except configparser.Error as e:
                logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
        else:
            logger.debug(f"Config file {self.config_path} does not exist")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get a configuration value from the specified section and key.

        Args:
            section: The configuration section
            key: The configuration key
            default: Value to return if the section or key doesn't exist

        Returns:
            The configuration value if it exists, otherwise the default value
        """
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default