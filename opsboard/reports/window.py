"""Reporting window and job timestamp parsing.

A report covers the previous calendar day in the report timezone. Jobs carry
their time in one of several fields and formats; the first field holding a
parseable value decides whether the job belongs to the window.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional
from zoneinfo import ZoneInfo

# Checked in this order
TIMESTAMP_FIELDS = ("starttime", "endtime", "realendtime", "schedtime", "start_time", "end_time")

# Epoch values above this are taken as milliseconds
_EPOCH_MS_THRESHOLD = 10**11


@dataclass(frozen=True)
class ReportWindow:
    """Half-open interval ``[start, end)`` covering one calendar day."""

    day: date
    start: datetime
    end: datetime
    tz: ZoneInfo

    @property
    def key(self) -> str:
        """Stable identifier used as the cache key."""
        return f"{self.day.isoformat()}@{self.tz.key}"

    @property
    def label(self) -> str:
        """Day formatted for messages (``dd/mm/YYYY``)."""
        return self.day.strftime("%d/%m/%Y")

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        return self.start <= moment < self.end


def previous_day_window(now: datetime, tz_name: str) -> ReportWindow:
    """Build the window for the calendar day before ``now`` in ``tz_name``.

    Args:
        now: Reference time. Naive values are read as UTC.
        tz_name: IANA timezone name, e.g. ``America/Sao_Paulo``.
    """
    tz = ZoneInfo(tz_name)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    day = now.astimezone(tz).date() - timedelta(days=1)
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return ReportWindow(day=day, start=start, end=end, tz=tz)


def parse_timestamp(value: Any, tz: ZoneInfo) -> Optional[datetime]:
    """Parse an ISO-8601 string, a Bacula ``YYYY-MM-DD HH:MM:SS`` string or epoch seconds.

    Naive values are interpreted in ``tz``. Returns None for anything unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _from_epoch(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    if text.lstrip("-").replace(".", "", 1).isdigit():
        return _from_epoch(float(text))
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def _from_epoch(seconds: float) -> Optional[datetime]:
    if seconds <= 0:
        return None
    if seconds > _EPOCH_MS_THRESHOLD:
        seconds = seconds / 1000
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def job_timestamp(job: Any, tz: ZoneInfo) -> Optional[datetime]:
    """Best-available timestamp of a job, following ``TIMESTAMP_FIELDS``."""
    for field in TIMESTAMP_FIELDS:
        value = job.get(field) if isinstance(job, dict) else getattr(job, field, None)
        parsed = parse_timestamp(value, tz)
        if parsed is not None:
            return parsed
    return None
