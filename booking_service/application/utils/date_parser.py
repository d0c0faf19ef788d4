from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from booking_service.application.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp such as ``2024-01-01T10:00:00Z``. An offset is required."""
    text = (value or "").strip()
    if not text:
        raise InvalidInputError("timestamp is required")
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00").replace("z", "+00:00"))
    except ValueError as e:
        raise InvalidInputError(f"invalid start time format: {value!r}") from e
    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise InvalidInputError(f"timestamp must carry a UTC offset: {value!r}")
    return parsed


def parse_day(value: str) -> date:
    """Parse a calendar day in ``YYYY-MM-DD`` form."""
    text = (value or "").strip()
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError as e:
        raise InvalidInputError(f"invalid date format: {value!r}") from e


def format_rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[: -len("+00:00")] + "Z"
    return text


def day_window(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """[00:00, +24h) of ``day`` in ``tz``. The end is an absolute 24 hours later, also on DST-change days."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    return start, start.astimezone(timezone.utc) + timedelta(days=1)


def working_window(day: date, tz: ZoneInfo, start_hour: int = 9, end_hour: int = 17) -> tuple[datetime, datetime]:
    return (
        datetime.combine(day, time(hour=start_hour), tzinfo=tz),
        datetime.combine(day, time(hour=end_hour), tzinfo=tz),
    )


def safe_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.warning("Unknown timezone %r, falling back to UTC", name, extra={"error": str(e)})
        return ZoneInfo("UTC")
