"""Date parsing and Roam daily-page formatting."""

from __future__ import annotations

import math
import re
from datetime import UTC, datetime

from todoist_backup.contracts.task import TaskDue
from todoist_backup.text import safe_text

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def format_human_date(value: datetime) -> str:
    """Format like a Roam daily page title: ``January 2nd, 2025``."""
    return f"{MONTH_NAMES[value.month - 1]} {value.day}{ordinal_suffix(value.day)}, {value.year}"


def parse_local(value: str | None) -> datetime | None:
    """Parse *value* into a local datetime, or ``None`` when it does not parse.

    Date-only values (``YYYY-MM-DD``) are local midnight, never UTC, so the
    calendar day does not drift with the host's offset. Values carrying an
    offset are converted to the local zone.
    """
    if not value:
        return None
    raw = value.strip()
    if ISO_DATE_PATTERN.match(raw):
        try:
            return datetime.strptime(raw, "%Y-%m-%d")
        except ValueError:
            return None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        return parsed.astimezone()
    return parsed


def format_display_date(value: str | None) -> str:
    parsed = parse_local(value)
    return format_human_date(parsed) if parsed is not None else ""


def format_due(due: TaskDue | None) -> str:
    """Human date for a due record: ``datetime``, then ``date``, then ``string``."""
    if due is None:
        return ""
    for candidate in (due.datetime, due.date, due.string):
        formatted = format_display_date(candidate)
        if formatted:
            return formatted
    return ""


def timestamp_of(value: str | None) -> float:
    """POSIX timestamp for sorting; ``inf`` when missing or unparseable."""
    parsed = parse_local(value)
    if parsed is None:
        return math.inf
    return parsed.timestamp()


def due_timestamp(due: TaskDue | None) -> float:
    if due is None:
        return math.inf
    for candidate in (due.datetime, due.date, due.string):
        value = timestamp_of(candidate)
        if value != math.inf:
            return value
    return math.inf


def format_timestamp(value: str) -> str:
    """Normalize to UTC ISO-8601 with milliseconds, e.g. ``2025-01-02T03:04:05.000Z``."""
    parsed = parse_local(value)
    if parsed is None:
        return safe_text(value)
    as_utc = parsed.astimezone(UTC)
    return as_utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{as_utc.microsecond // 1000:03d}Z"
