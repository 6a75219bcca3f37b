"""Sidecar marker files written by background steps."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from workflow_telemetry.constants import (
    COMPLETED_AT_MARKER_SUFFIX,
    STARTED_AT_MARKER_SUFFIX,
)
from workflow_telemetry.utils import parse_timestamp

logger = logging.getLogger(__name__)


def marker_path(marker_dir: Union[str, Path], step_name: str, suffix: str) -> Path:
    return Path(marker_dir) / f"{step_name}{suffix}"


def read_marker(path: Path) -> Optional[datetime]:
    """Read a timestamp from a marker file.

    Missing, unreadable or unparseable markers are logged and yield None.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.info(f'Unable to read "{path}": {e}')
        return None

    try:
        value = parse_timestamp(content)
    except ValueError as e:
        logger.info(f'Unable to parse "{path}": {e}')
        return None

    if value is None:
        logger.info(f'Marker "{path}" is empty')
    return value


def read_started_at(marker_dir: Union[str, Path], step_name: str) -> Optional[datetime]:
    return read_marker(marker_path(marker_dir, step_name, STARTED_AT_MARKER_SUFFIX))


def read_completed_at(
    marker_dir: Union[str, Path], step_name: str
) -> Optional[datetime]:
    return read_marker(marker_path(marker_dir, step_name, COMPLETED_AT_MARKER_SUFFIX))
