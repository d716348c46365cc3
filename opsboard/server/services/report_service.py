"""
Report Service.

Wires repositories, the serverless-function client and the source-data cache
into the report runner, dispatcher, health check and metrics used by the API.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from opsboard.core.database import async_session_maker
from opsboard.core.database.repositories import ReportRepoBundle, build_report_repos
from opsboard.core.logging_config import get_logger
from opsboard.functions import FunctionsClient
from opsboard.reports import (
    BaculaDailyReportRunner,
    ReportHealth,
    ReportMetrics,
    ReportRunRequest,
    RunOutcome,
    ScheduledReportDispatcher,
    TTLCache,
    summarize_health,
    summarize_metrics,
)
from opsboard.server.core.config import ReportConfig, settings

logger = get_logger(__name__)


class ReportService:
    """
    Service layer for the report endpoints.

    One instance lives for the whole process, so its cache is shared by every
    request served by this process.
    """

    def __init__(
        self,
        repos: ReportRepoBundle,
        functions: FunctionsClient,
        *,
        config: ReportConfig,
        cache: Optional[TTLCache] = None,
        runner: Optional[BaculaDailyReportRunner] = None,
    ) -> None:
        self.repos = repos
        self.functions = functions
        self.config = config
        self.cache = cache or TTLCache(ttl_seconds=config.cache_ttl_seconds)
        self.runner = runner or BaculaDailyReportRunner(repos, functions, config=config, cache=self.cache)
        self.dispatcher = ScheduledReportDispatcher(repos, self.runner, timezone_name=config.timezone)

    async def run_daily_report(self, request: ReportRunRequest) -> RunOutcome:
        logger.info(
            "Bacula daily report requested (test_mode=%s, report_id=%s)", request.test_mode, request.report_id
        )
        return await self.runner.run(request)

    async def process_scheduled(self) -> Dict[str, Any]:
        return await self.dispatcher.process_due()

    async def health(self) -> ReportHealth:
        return await summarize_health(self.repos.logs)

    async def metrics(self, days: int) -> ReportMetrics:
        return await summarize_metrics(self.repos.logs, days=days)

    async def aclose(self) -> None:
        await self.functions.aclose()


_report_service: Optional[ReportService] = None


def get_report_service() -> ReportService:
    global _report_service
    if _report_service is None:
        _report_service = ReportService(
            build_report_repos(session_factory=async_session_maker),
            FunctionsClient.from_config(settings.functions),
            config=settings.report,
        )
    return _report_service


async def close_report_service() -> None:
    global _report_service
    if _report_service is not None:
        await _report_service.aclose()
        _report_service = None
