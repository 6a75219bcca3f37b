"""General utils functions"""

from datetime import datetime, timezone
from typing import Optional, Union


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(text: Union[str, bytes, None]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp or a number of epoch seconds.

    Args:
        text: Raw text, e.g. the content of a sidecar marker file

    Returns:
        An aware UTC datetime, or None if the text is empty

    Raises:
        ValueError: if the text is neither ISO-8601 nor a number
    """
    if text is None:
        return None
    if isinstance(text, bytes):
        text = text.decode("utf-8")
    text = text.strip()
    if not text:
        return None

    # Plain numbers first: digit strings can also read as basic ISO dates
    try:
        return datetime.fromtimestamp(float(text), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        pass

    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        raise ValueError(f"Unrecognised timestamp: {text!r}")


def epoch_seconds(value: datetime) -> float:
    return as_utc(value).timestamp()


def epoch_millis(value: datetime) -> int:
    return round(epoch_seconds(value) * 1000)


def format_number(value: Union[int, float]) -> str:
    """Format a sample value without a trailing `.0` for whole numbers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, float):
        return repr(value)
    return str(value)
