"""Scheduled report dispatching.

Schedules store a five-field cron expression but only three fields are
honored: minute, hour and day of week. Day of month and month are ignored.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Set
from zoneinfo import ZoneInfo

from opsboard.core.database.base import as_utc
from opsboard.core.database.repositories import ReportRepoBundle
from opsboard.core.logging_config import get_logger

from .runner import BaculaDailyReportRunner

logger = get_logger(__name__)


def _parse_days(field: str) -> Optional[Set[int]]:
    """Allowed weekdays (0 = Sunday) for a cron day-of-week field, or None for any day."""
    field = field.strip()
    if field in ("*", "?", ""):
        return None
    days: Set[int] = set()
    for part in field.split(","):
        part = part.strip()
        try:
            if "-" in part:
                low, high = (int(x) for x in part.split("-", 1))
                days.update(d % 7 for d in range(low, high + 1))
            else:
                days.add(int(part) % 7)
        except ValueError:
            logger.warning("Ignoring invalid day-of-week entry '%s'", part)
    return days or None


def _cron_weekday(moment: datetime) -> int:
    # Python weekday(): Monday = 0; cron: Sunday = 0
    return (moment.weekday() + 1) % 7


def calculate_next_execution(cron_expression: str, from_time: datetime) -> datetime:
    """Next run time of a schedule after ``from_time``.

    With fewer than five fields, or a non-numeric minute or hour, the next run
    is the next top of the hour. Otherwise the run happens at the given hour
    and minute, today if still ahead, and is then moved forward to the first
    allowed weekday.

    The result keeps the timezone of ``from_time``.
    """
    parts = (cron_expression or "").split()
    try:
        if len(parts) < 5:
            raise ValueError(cron_expression)
        minute, hour = int(parts[0]), int(parts[1])
        candidate = from_time.replace(hour=hour, minute=minute, second=0, microsecond=0)
    except ValueError:
        return from_time.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)

    if candidate <= from_time:
        candidate += timedelta(days=1)
    allowed = _parse_days(parts[4])
    if allowed:
        while _cron_weekday(candidate) not in allowed:
            candidate += timedelta(days=1)
    return candidate


class ScheduledReportDispatcher:
    """Runs every due scheduled report and advances its schedule."""

    def __init__(self, repos: ReportRepoBundle, runner: BaculaDailyReportRunner, *, timezone_name: str) -> None:
        self._repos = repos
        self._runner = runner
        self._tz = ZoneInfo(timezone_name)

    def _next_execution_utc(self, cron_expression: str, now: datetime) -> datetime:
        local = now.astimezone(self._tz)
        return calculate_next_execution(cron_expression, local).astimezone(timezone.utc)

    async def process_due(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Execute all due schedules.

        Args:
            now: Reference time, aware or naive UTC. Defaults to the current time.

        Returns:
            ``{executed_reports, successful, failed, results, timestamp}``
        """
        now = as_utc(now or datetime.now(timezone.utc))

        due = await self._repos.schedules.list_due(now)
        logger.info("Found %s scheduled reports due", len(due))

        results: List[Dict[str, Any]] = []
        for schedule in due:
            entry: Dict[str, Any] = {"report_id": schedule.id, "name": schedule.name, "success": False}
            try:
                template = await self._repos.templates.get_active(schedule.report_type)
                if template is None:
                    entry["error"] = f"Template '{schedule.report_type}' not found or inactive"
                else:
                    outcome = await self._runner.execute(template, [schedule.phone_number], report_id=schedule.id)
                    entry["status_code"] = outcome.status_code
                    entry["success"] = outcome.success
                    if outcome.success:
                        next_execution = self._next_execution_utc(schedule.cron_expression, now)
                        await self._repos.schedules.mark_executed(
                            schedule.id, executed_at=now, next_execution=next_execution
                        )
                        entry["next_execution"] = next_execution.isoformat()
                    else:
                        entry["error"] = outcome.body.get("error") or outcome.body.get("message")
            except Exception as e:
                logger.error("Scheduled report %s failed: %s", schedule.id, e, exc_info=True)
                entry["error"] = str(e)
            results.append(entry)

        successful = sum(1 for r in results if r["success"])
        return {
            "executed_reports": len(results),
            "successful": successful,
            "failed": len(results) - successful,
            "results": results,
            "timestamp": now.isoformat(),
        }
