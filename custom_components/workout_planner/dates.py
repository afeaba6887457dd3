"""Calendar helpers.

A "week" is any 7-day window anchored to a configurable start day. All math
happens on naive UTC calendar dates so day boundaries never drift with the
host timezone.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

from .const import DAY_NAMES


def _day_index(day_key: str) -> int:
    try:
        return DAY_NAMES.index(day_key)
    except ValueError:
        raise ValueError(f"Invalid day key: {day_key}") from None


def to_utc_date(value: date | datetime) -> date:
    """Drop the time part; aware datetimes are converted to UTC first."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()
    return value


def parse_iso(date_iso: str) -> date:
    try:
        # A trailing time part ("2024-01-01T08:00:00Z") is dropped; anything else must parse.
        return date.fromisoformat(str(date_iso).split("T", 1)[0])
    except ValueError:
        raise ValueError(f"Invalid ISO date: {date_iso!r}") from None


def iso(value: date | datetime) -> str:
    return to_utc_date(value).isoformat()


def start_of_week(value: date | datetime, week_start_day: str) -> date:
    """Return the first day of the 7-day window containing value."""
    day_value = to_utc_date(value)
    diff = (day_value.weekday() - _day_index(week_start_day)) % 7
    return day_value - timedelta(days=diff)


def day_order(week_start_day: str) -> list[str]:
    """Day names rotated so week_start_day comes first."""
    start = _day_index(week_start_day)
    return [*DAY_NAMES[start:], *DAY_NAMES[:start]]


def date_for_day_in_week(week_start_iso: str, day_key: str, week_start_day: str) -> str:
    order = day_order(week_start_day)
    if day_key not in order:
        raise ValueError(f"Invalid day key: {day_key}")
    return (parse_iso(week_start_iso) + timedelta(days=order.index(day_key))).isoformat()


def day_key_for_date(date_iso: str) -> str:
    """Inverse of date_for_day_in_week; the label does not depend on the anchor."""
    return DAY_NAMES[parse_iso(date_iso).weekday()]


def week_dates(week_start_iso: str) -> list[str]:
    start = parse_iso(week_start_iso)
    return [(start + timedelta(days=i)).isoformat() for i in range(7)]


def week_for_date(date_iso: str, week_start_day: str) -> str:
    return start_of_week(parse_iso(date_iso), week_start_day).isoformat()


def previous_week(week_start_iso: str) -> str:
    return (parse_iso(week_start_iso) - timedelta(days=7)).isoformat()


def next_week(week_start_iso: str) -> str:
    return (parse_iso(week_start_iso) + timedelta(days=7)).isoformat()


def is_date_in_week(date_iso: str, week_start_iso: str) -> bool:
    return date_iso in week_dates(week_start_iso)


def current_week_start(today: date | datetime, week_start_day: str) -> str:
    """Week anchor for the window containing today."""
    return start_of_week(today, week_start_day).isoformat()


def parse_time_to_sec(value: str) -> int | None:
    """Parse "h:mm:ss", "m:ss" or "s" into seconds."""
    raw = str(value or "").strip()
    if not raw:
        return None
    try:
        parts = [int(p) for p in raw.split(":")]
    except ValueError:
        return None
    if len(parts) == 3:
        return parts[0] * 3600 + parts[1] * 60 + parts[2]
    if len(parts) == 2:
        return parts[0] * 60 + parts[1]
    if len(parts) == 1:
        return parts[0]
    return None


def format_seconds(seconds: float) -> str:
    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
