"""
Repository bundle for dependency injection.

This module provides a convenience bundle of all repository instances
used by the report pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .integrations import IntegrationRepository
from .message_templates import MessageTemplateRepository
from .scheduled_reports import ScheduledReportLogRepository, ScheduledReportRepository


@dataclass(frozen=True)
class ReportRepoBundle:
    """Convenience bundle of all SQL repositories for dependency injection."""

    integrations: IntegrationRepository
    templates: MessageTemplateRepository
    schedules: ScheduledReportRepository
    logs: ScheduledReportLogRepository


def build_report_repos(*, session_factory: async_sessionmaker[AsyncSession]) -> ReportRepoBundle:
    """Build a ``ReportRepoBundle`` from a session factory.

    Args:
        session_factory: Async session factory shared by every repository

    Returns:
        Bundle containing all repository instances
    """
    return ReportRepoBundle(
        integrations=IntegrationRepository(session_factory=session_factory),
        templates=MessageTemplateRepository(session_factory=session_factory),
        schedules=ScheduledReportRepository(session_factory=session_factory),
        logs=ScheduledReportLogRepository(session_factory=session_factory),
    )
