"""
Scheduled report repositories.

Recipients and schedules live in ``scheduled_reports``; every pipeline run
appends one row to ``scheduled_reports_logs``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlmodel import select

from ..base import as_utc, utc_now
from ..entities.scheduled_reports import ScheduledReport, ScheduledReportLog
from .base import AsyncBaseRepository


@dataclass(frozen=True)
class ScheduledReportRepository(AsyncBaseRepository):
    """SQL access to the ``scheduled_reports`` table."""

    async def create(self, report: ScheduledReport) -> ScheduledReport:
        """Persist a new scheduled report row."""
        async with self.session_factory() as s:
            s.add(report)
            await s.commit()
            await s.refresh(report)
            return report

    async def get(self, report_id: str) -> Optional[ScheduledReport]:
        async with self.session_factory() as s:
            return await s.get(ScheduledReport, report_id)

    async def list_active_for_template(self, template_id: str) -> List[ScheduledReport]:
        """
        List the active schedules that deliver a template.

        Args:
            template_id: Template id stored in ``report_type``.

        Returns:
            Active rows in creation order.
        """
        async with self.session_factory() as s:
            stmt = (
                select(ScheduledReport)
                .where(ScheduledReport.report_type == template_id)
                .where(ScheduledReport.is_active == True)  # noqa: E712
                .order_by(ScheduledReport.created_at)
            )
            result = await s.execute(stmt)
            return list(result.scalars().all())

    async def list_due(self, now: datetime) -> List[ScheduledReport]:
        """
        List the active schedules whose next execution is not after ``now``.

        Args:
            now: Reference time; naive values are taken as UTC.

        Returns:
            Due rows, earliest first.
        """
        async with self.session_factory() as s:
            stmt = (
                select(ScheduledReport)
                .where(ScheduledReport.is_active == True)  # noqa: E712
                .where(ScheduledReport.next_execution.is_not(None))
                .where(ScheduledReport.next_execution <= as_utc(now))
                .order_by(ScheduledReport.next_execution)
            )
            result = await s.execute(stmt)
            return list(result.scalars().all())

    async def mark_executed(self, report_id: str, *, executed_at: datetime, next_execution: datetime) -> None:
        """
        Record a successful execution of a schedule.

        Args:
            report_id: Schedule primary key.
            executed_at: UTC time of the execution.
            next_execution: UTC time of the following run.
        """
        async with self.session_factory() as s:
            row = await s.get(ScheduledReport, report_id)
            if row is None:
                return
            row.last_execution = as_utc(executed_at)
            row.next_execution = as_utc(next_execution)
            row.execution_count = (row.execution_count or 0) + 1
            row.updated_at = utc_now()
            await s.commit()


@dataclass(frozen=True)
class ScheduledReportLogRepository(AsyncBaseRepository):
    """SQL access to the ``scheduled_reports_logs`` table."""

    async def create(self, log: ScheduledReportLog) -> ScheduledReportLog:
        """
        Append a run log row.

        Args:
            log: The row to insert.

        Returns:
            The persisted row.
        """
        async with self.session_factory() as s:
            s.add(log)
            await s.commit()
            await s.refresh(log)
            return log

    async def list_since(self, since: datetime) -> List[ScheduledReportLog]:
        """
        List run logs executed at or after ``since``, newest first.

        Args:
            since: Lower bound; naive values are taken as UTC.
        """
        async with self.session_factory() as s:
            stmt = (
                select(ScheduledReportLog)
                .where(ScheduledReportLog.execution_date >= as_utc(since))
                .order_by(ScheduledReportLog.execution_date.desc())
            )
            result = await s.execute(stmt)
            return list(result.scalars().all())
