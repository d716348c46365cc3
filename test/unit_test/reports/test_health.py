"""Unit tests for the report health summary."""

from datetime import datetime, timedelta, timezone

import pytest

from opsboard.core.database.entities import ScheduledReportLog
from opsboard.reports.health import summarize_health, summarize_metrics

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

pytestmark = pytest.mark.asyncio


async def _add(repos, status, *, hours_ago=1.0, ms=1000, response=None):
    return await repos.logs.create(
        ScheduledReportLog(
            status=status,
            phone_number="111",
            execution_date=NOW - timedelta(hours=hours_ago),
            execution_time_ms=ms,
            whatsapp_response=response,
        )
    )


async def test_no_runs(repos):
    health = await summarize_health(repos.logs, now=NOW)

    assert health.status == "healthy"
    assert health.total_executions == 0
    assert health.success_rate == 0
    assert health.avg_execution_time_ms == 0
    assert health.last_execution is None
    assert health.checked_at == NOW.isoformat()
    assert len(health.recommendations) == 1
    assert "Few report runs" in health.recommendations[0]


async def test_all_successful(repos):
    for hours in (1, 2, 3, 4, 5):
        await _add(repos, "success", hours_ago=hours, ms=2000)

    health = await summarize_health(repos.logs, now=NOW)

    assert health.status == "healthy"
    assert health.total_executions == 5
    assert health.failed_executions == 0
    assert health.success_rate == 100
    assert health.avg_execution_time_ms == 2000
    assert health.last_execution == "2026-03-10T11:00:00+00:00"
    assert health.recommendations == []


@pytest.mark.parametrize("failures,status", [(1, "warning"), (2, "warning"), (3, "critical"), (5, "critical")])
async def test_status_follows_failure_count(repos, failures, status):
    for _ in range(failures):
        await _add(repos, "error")
    for _ in range(5):
        await _add(repos, "success")

    health = await summarize_health(repos.logs, now=NOW)

    assert health.status == status
    assert health.failed_executions == failures
    assert any("some report runs failed" in r for r in health.recommendations)


async def test_only_last_24_hours_count(repos):
    await _add(repos, "error", hours_ago=30)
    await _add(repos, "success", hours_ago=23)

    health = await summarize_health(repos.logs, now=NOW)

    assert health.total_executions == 1
    assert health.status == "healthy"


async def test_slow_runs(repos):
    await _add(repos, "success", ms=40_000)
    await _add(repos, "success", ms=30_000)

    health = await summarize_health(repos.logs, now=NOW)

    assert health.avg_execution_time_ms == 35_000
    assert any("slow" in r for r in health.recommendations)


async def test_success_rate_rounds(repos):
    await _add(repos, "error")
    await _add(repos, "success")
    await _add(repos, "success")

    health = await summarize_health(repos.logs, now=NOW)

    assert health.success_rate == 67


class TestMetrics:
    async def test_no_runs(self, repos):
        metrics = await summarize_metrics(repos.logs, now=NOW)

        assert metrics.days == 7
        assert metrics.total_reports == 0
        assert metrics.avg_execution_time_ms == 0
        assert metrics.daily_breakdown == {}
        assert metrics.error_patterns == {}
        assert metrics.generated_at == NOW.isoformat()

    async def test_totals_daily_breakdown_and_error_patterns(self, repos):
        patterns = {"error_patterns": {"Fatal error": 2, "Canceled": 1}}
        await _add(repos, "success", hours_ago=1, ms=1000, response=patterns)
        await _add(repos, "error", hours_ago=13, ms=2000, response={"error_patterns": {"Fatal error": 1, "bad": "x"}})
        await _add(repos, "success", hours_ago=20, ms=3000, response={"results": []})
        await _add(repos, "skipped", hours_ago=30, ms=6000)
        await _add(repos, "success", hours_ago=24 * 8)

        metrics = await summarize_metrics(repos.logs, now=NOW)

        assert metrics.total_reports == 4
        assert metrics.successful_reports == 2
        assert metrics.failed_reports == 1
        assert metrics.avg_execution_time_ms == 3000
        assert {day: runs.model_dump() for day, runs in metrics.daily_breakdown.items()} == {
            "2026-03-10": {"total": 1, "success": 1, "failed": 0},
            "2026-03-09": {"total": 3, "success": 1, "failed": 1},
        }
        assert metrics.error_patterns == {"Fatal error": 3, "Canceled": 1}

    async def test_days_bound_the_window(self, repos):
        await _add(repos, "success", hours_ago=1)
        await _add(repos, "error", hours_ago=30)

        metrics = await summarize_metrics(repos.logs, days=1, now=NOW)

        assert metrics.days == 1
        assert metrics.total_reports == 1
        assert metrics.failed_reports == 0
