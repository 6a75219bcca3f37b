from datetime import datetime, timezone

import pytest

from workflow_telemetry.telemetry.markers import (
    marker_path,
    read_completed_at,
    read_marker,
    read_started_at,
)


@pytest.mark.short
def test_marker_path(tmp_path):
    assert marker_path(tmp_path, "Build", ".started_at") == tmp_path / "Build.started_at"


@pytest.mark.short
def test_read_started_and_completed_markers(tmp_path):
    (tmp_path / "Build.started_at").write_text("2021-08-01T00:00:20Z")
    (tmp_path / "Build.completed_at").write_text("  1627776240\n")

    assert read_started_at(tmp_path, "Build") == datetime(
        2021, 8, 1, 0, 0, 20, tzinfo=timezone.utc
    )
    assert read_completed_at(tmp_path, "Build") == datetime(
        2021, 8, 1, 0, 4, 0, tzinfo=timezone.utc
    )


@pytest.mark.short
def test_missing_marker_is_logged(tmp_path, capture_logs):
    assert read_marker(tmp_path / "Build.started_at") is None
    assert "Unable to read" in capture_logs.getvalue()


@pytest.mark.short
def test_empty_marker(tmp_path, capture_logs):
    path = tmp_path / "Build.started_at"
    path.write_text("\n")

    assert read_marker(path) is None
    assert "is empty" in capture_logs.getvalue()


@pytest.mark.short
def test_garbage_marker(tmp_path):
    path = tmp_path / "Build.started_at"
    path.write_text("yesterday")

    assert read_marker(path) is None


@pytest.mark.short
def test_directory_instead_of_marker(tmp_path):
    (tmp_path / "Build.started_at").mkdir()

    assert read_started_at(tmp_path, "Build") is None
