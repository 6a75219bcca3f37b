import io
import logging

import pytest

from workflow_telemetry.model import Job, Step


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("workflow_telemetry")
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    log_stream.close()


@pytest.fixture
def make_step():
    """Factory for steps with sensible defaults."""

    def _make_step(number: int, name: str, **kwargs) -> Step:
        defaults = {
            "status": "completed",
            "conclusion": "success",
            "started_at": "2021-08-01T00:00:00Z",
            "completed_at": "2021-08-01T00:00:01Z",
        }
        return Step(number=number, name=name, **{**defaults, **kwargs})

    return _make_step


@pytest.fixture
def make_job():
    """Factory for jobs wrapping a list of steps."""

    def _make_job(steps, **kwargs) -> Job:
        defaults = {
            "id": 42,
            "name": "test-job",
            "head_sha": "123456",
            "status": "in_progress",
            "runner_name": "runner-1",
        }
        return Job(steps=steps, **{**defaults, **kwargs})

    return _make_job


@pytest.fixture
def marker_dir(tmp_path):
    """Empty directory standing in for /tmp sidecar markers."""
    path = tmp_path / "markers"
    path.mkdir()
    return path
