"""
Async repositories for the report pipeline tables.
"""

from .base import AsyncBaseRepository
from .bundle import ReportRepoBundle, build_report_repos
from .integrations import IntegrationRepository
from .message_templates import MessageTemplateRepository
from .scheduled_reports import ScheduledReportLogRepository, ScheduledReportRepository

__all__ = [
    "AsyncBaseRepository",
    "IntegrationRepository",
    "MessageTemplateRepository",
    "ReportRepoBundle",
    "ScheduledReportLogRepository",
    "ScheduledReportRepository",
    "build_report_repos",
]
