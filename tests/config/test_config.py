"""
Unit tests for ReportConfig and the configuration helpers.
"""

import json
from pathlib import Path

import pytest

from workflow_telemetry.config import (
    ConfigAccessor,
    ReportConfig,
    parse_bool,
    parse_extra_labels,
    read_pull_request,
)
from workflow_telemetry.exceptions import ConfigurationError

BASE_ENV = {
    "GITHUB_REPOSITORY": "octo/repo",
    "GITHUB_RUN_ID": "1234",
    "GITHUB_SHA": "abcdef",
    "GITHUB_WORKFLOW": "CI",
    "RUNNER_NAME": "runner-1",
    "GITHUB_TOKEN": "secret",
}


@pytest.fixture
def pull_request_event(tmp_path):
    path = tmp_path / "event.json"
    path.write_text(
        json.dumps({"pull_request": {"number": 7, "head": {"sha": "feedbeef"}}})
    )
    return path


@pytest.fixture
def defaults_file(tmp_path):
    path = tmp_path / "workflow_telemetry.cfg"
    path.write_text(
        """
[prometheus]
push_gateway_url = http://gw:9091/metrics/job/ci
extra_labels = team=infra
        """
    )
    return path


@pytest.mark.short
class TestParseExtraLabels:
    def test_commas_and_newlines(self):
        assert parse_extra_labels("a=1, b=2\nc = 3\n") == {
            "a": "1",
            "b": "2",
            "c": "3",
        }

    def test_value_may_contain_equals(self):
        assert parse_extra_labels("query=a=b") == {"query": "a=b"}

    @pytest.mark.parametrize("text", [None, "", " , \n"])
    def test_empty(self, text):
        assert parse_extra_labels(text) == {}

    def test_missing_equals(self):
        with pytest.raises(ValueError):
            parse_extra_labels("team")


@pytest.mark.short
@pytest.mark.parametrize(
    "value,default,expected",
    [
        ("true", False, True),
        ("TRUE", False, True),
        ("false", True, False),
        (None, True, True),
        ("", False, False),
        ("nope", True, False),
    ],
)
def test_parse_bool(value, default, expected):
    assert parse_bool(value, default) is expected


@pytest.mark.short
class TestReportConfigFromEnv:
    def test_minimal_environment(self):
        config = ReportConfig.from_env(BASE_ENV)

        assert config.repository == "octo/repo"
        assert config.run_id == 1234
        assert config.commit == "abcdef"
        assert config.token == "secret"
        assert config.api_url == "https://api.github.com"
        assert config.marker_dir == Path("/tmp")
        assert config.push_gateway_url is None
        assert config.extra_labels == {}
        assert config.job_summary is True
        assert config.comment_on_pr is False

    def test_token_is_not_in_repr(self):
        assert "secret" not in repr(ReportConfig.from_env(BASE_ENV))

    def test_action_inputs(self):
        env = {
            **BASE_ENV,
            "INPUT_PROMETHEUS_PUSH_GATEWAY_URL": "http://gw:9091/metrics/job/ci",
            "INPUT_PROMETHEUS_EXTRA_LABELS": "team=infra,pool=large",
            "INPUT_JOB_STATUS": "failure",
            "INPUT_JOB_SUMMARY": "false",
            "INPUT_COMMENT_ON_PR": "true",
            "INPUT_MARKER_DIR": "/var/markers",
        }

        config = ReportConfig.from_env(env)

        assert config.push_gateway_url == "http://gw:9091/metrics/job/ci"
        assert config.extra_labels == {"team": "infra", "pool": "large"}
        assert config.job_status == "failure"
        assert config.job_summary is False
        assert config.comment_on_pr is True
        assert config.marker_dir == Path("/var/markers")

    def test_blank_push_gateway_url(self):
        env = {**BASE_ENV, "INPUT_PROMETHEUS_PUSH_GATEWAY_URL": "  "}

        assert ReportConfig.from_env(env).push_gateway_url is None

    def test_pull_request_head_is_reported_commit(self, pull_request_event):
        env = {**BASE_ENV, "GITHUB_EVENT_PATH": str(pull_request_event)}

        config = ReportConfig.from_env(env)

        assert config.pull_request.number == 7
        assert config.commit == "feedbeef"

    def test_overrides_win(self):
        config = ReportConfig.from_env(
            BASE_ENV, run_id=99, job_status="success", push_gateway_url=None
        )

        assert config.run_id == 99
        assert config.job_status == "success"

    def test_defaults_file(self, defaults_file):
        config = ReportConfig.from_env(BASE_ENV, config_file=defaults_file)

        assert config.push_gateway_url == "http://gw:9091/metrics/job/ci"
        assert config.extra_labels == {"team": "infra"}

    def test_inputs_win_over_defaults_file(self, defaults_file):
        env = {**BASE_ENV, "INPUT_PROMETHEUS_EXTRA_LABELS": "team=web"}

        config = ReportConfig.from_env(env, config_file=defaults_file)

        assert config.extra_labels == {"team": "web"}

    @pytest.mark.parametrize("missing", ["GITHUB_REPOSITORY", "GITHUB_RUN_ID"])
    def test_missing_required_variable(self, missing):
        env = {k: v for k, v in BASE_ENV.items() if k != missing}

        with pytest.raises(ConfigurationError, match=missing):
            ReportConfig.from_env(env)

    def test_invalid_repository(self):
        with pytest.raises(ConfigurationError):
            ReportConfig.from_env({**BASE_ENV, "GITHUB_REPOSITORY": "repo"})

    def test_invalid_label_name(self):
        env = {**BASE_ENV, "INPUT_PROMETHEUS_EXTRA_LABELS": "my-label=x"}

        with pytest.raises(ConfigurationError, match="label name"):
            ReportConfig.from_env(env)

    def test_malformed_labels(self):
        env = {**BASE_ENV, "INPUT_PROMETHEUS_EXTRA_LABELS": "oops"}

        with pytest.raises(ConfigurationError, match="prometheus_extra_labels"):
            ReportConfig.from_env(env)


@pytest.mark.short
class TestReadPullRequest:
    def test_no_event(self):
        assert read_pull_request(None) is None

    def test_push_event(self, tmp_path):
        path = tmp_path / "event.json"
        path.write_text(json.dumps({"ref": "refs/heads/main"}))

        assert read_pull_request(str(path)) is None

    def test_unreadable_event(self, tmp_path, capture_logs):
        assert read_pull_request(str(tmp_path / "missing.json")) is None
        assert "Could not read event payload" in capture_logs.getvalue()

    def test_pull_request_event(self, pull_request_event):
        pull_request = read_pull_request(str(pull_request_event))

        assert pull_request.number == 7
        assert pull_request.head_sha == "feedbeef"


@pytest.mark.short
class TestConfigAccessor:
    def test_get_existing(self, defaults_file):
        config = ConfigAccessor(defaults_file)

        assert config.get("prometheus", "extra_labels") == "team=infra"

    def test_get_missing_with_default(self, defaults_file):
        config = ConfigAccessor(defaults_file)

        assert config.get("prometheus", "missing", default="x") == "x"
        assert config.get("missing", "key") is None

    def test_missing_file(self, tmp_path):
        config = ConfigAccessor(tmp_path / "nope.cfg")

        assert config.get("prometheus", "push_gateway_url") is None
