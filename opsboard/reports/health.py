"""Report pipeline health and metrics summaries built from run logs."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from opsboard.core.database.base import as_utc
from opsboard.core.database.repositories import ScheduledReportLogRepository

from .formatting import format_percent

HEALTHY = "healthy"
WARNING = "warning"
CRITICAL = "critical"

SLOW_RUN_MS = 30_000
MIN_EXPECTED_RUNS = 5
DEFAULT_METRICS_DAYS = 7


class ReportHealth(BaseModel):
    status: str
    total_executions: int = 0
    failed_executions: int = 0
    success_rate: int = 0
    avg_execution_time_ms: int = 0
    last_execution: Optional[str] = None
    recommendations: List[str] = Field(default_factory=list)
    checked_at: str


class DailyRuns(BaseModel):
    total: int = 0
    success: int = 0
    failed: int = 0


class ReportMetrics(BaseModel):
    """Run statistics over the last ``days`` days."""

    days: int
    total_reports: int = 0
    successful_reports: int = 0
    failed_reports: int = 0
    avg_execution_time_ms: int = 0
    daily_breakdown: Dict[str, DailyRuns] = Field(default_factory=dict)
    error_patterns: Dict[str, int] = Field(default_factory=dict)
    generated_at: str


def _rate_status(failed: int) -> str:
    if failed == 0:
        return HEALTHY
    if failed < 3:
        return WARNING
    return CRITICAL


async def summarize_health(logs: ScheduledReportLogRepository, *, now: Optional[datetime] = None) -> ReportHealth:
    """Summarize run logs of the last 24 hours.

    Args:
        logs: Run log repository.
        now: Reference time. Defaults to the current UTC time.
    """
    now = as_utc(now or datetime.now(timezone.utc))
    since = now - timedelta(hours=24)
    rows = await logs.list_since(since)

    total = len(rows)
    failed = sum(1 for r in rows if r.status == "error")
    timings = [r.execution_time_ms for r in rows if r.execution_time_ms is not None]
    avg_ms = int(round(sum(timings) / len(timings))) if timings else 0
    last = max((r.execution_date for r in rows), default=None)

    recommendations: List[str] = []
    if failed > 0:
        recommendations.append("Check the Bacula and WhatsApp integrations: some report runs failed")
    if avg_ms > SLOW_RUN_MS:
        recommendations.append("Report runs are slow: consider reducing the fetched job volume")
    if total < MIN_EXPECTED_RUNS:
        recommendations.append("Few report runs in the last 24 hours: check that schedules are active")

    return ReportHealth(
        status=_rate_status(failed),
        total_executions=total,
        failed_executions=failed,
        success_rate=format_percent(total - failed, total),
        avg_execution_time_ms=avg_ms,
        last_execution=last.isoformat() if last else None,
        recommendations=recommendations,
        checked_at=now.isoformat(),
    )


async def summarize_metrics(
    logs: ScheduledReportLogRepository, *, days: int = DEFAULT_METRICS_DAYS, now: Optional[datetime] = None
) -> ReportMetrics:
    """Aggregate run logs of the last ``days`` days.

    Runs are bucketed per UTC day of ``execution_date``. Error patterns are the
    failed-job counts each run stored in ``whatsapp_response.error_patterns``,
    summed across runs.
    """
    now = as_utc(now or datetime.now(timezone.utc))
    rows = await logs.list_since(now - timedelta(days=days))

    daily: Dict[str, DailyRuns] = {}
    patterns: Dict[str, int] = {}
    for row in rows:
        day = daily.setdefault(as_utc(row.execution_date).date().isoformat(), DailyRuns())
        day.total += 1
        if row.status == "success":
            day.success += 1
        elif row.status == "error":
            day.failed += 1
        for pattern, count in ((row.whatsapp_response or {}).get("error_patterns") or {}).items():
            if isinstance(count, int):
                patterns[pattern] = patterns.get(pattern, 0) + count

    total = len(rows)
    avg_ms = int(round(sum(r.execution_time_ms or 0 for r in rows) / total)) if total else 0
    return ReportMetrics(
        days=days,
        total_reports=total,
        successful_reports=sum(1 for r in rows if r.status == "success"),
        failed_reports=sum(1 for r in rows if r.status == "error"),
        avg_execution_time_ms=avg_ms,
        daily_breakdown=daily,
        error_patterns=patterns,
        generated_at=now.isoformat(),
    )
