"""Bacula daily report runner.

Pipeline: resolve template, recipients and messaging instance; fetch Bacula
jobs; keep the previous day's jobs; aggregate; render; send to every recipient;
record one log row.

The runner never raises. Configuration problems, an unreachable data source and
unexpected errors become a 500 outcome, everything that reached the send
step becomes a 200 outcome, even when every send failed.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from opsboard.core.database.base import utc_now
from opsboard.core.database.entities import MessageTemplate, ScheduledReportLog
from opsboard.core.database.repositories import ReportRepoBundle
from opsboard.core.logging_config import get_logger
from opsboard.core.monitoring import log_error, log_report_run
from opsboard.functions import FunctionsClient
from opsboard.server.core.config import ReportConfig

from .aggregate import ReportData, build_report
from .cache import TTLCache
from .errors import ReportConfigurationError, ReportError, SourceUnavailableError
from .fetcher import BaculaFetcher
from .normalize import normalize_jobs
from .notifier import SendResult, WhatsAppNotifier
from .template import render_template
from .window import ReportWindow, job_timestamp, previous_day_window

logger = get_logger(__name__)

MESSAGING_INTEGRATION_TYPE = "evolution_api"
MAX_LOGGED_MESSAGE_CHARS = 1000


class ReportRunRequest(BaseModel):
    """Body of a report run request."""

    test_mode: bool = Field(default=False, description="Send only to phone_number")
    phone_number: Optional[str] = Field(default=None, description="Recipient used in test mode")
    report_id: Optional[str] = Field(default=None, description="Template id; the default template type otherwise")


@dataclass(frozen=True)
class RunOutcome:
    """HTTP status and JSON body of a finished run."""

    status_code: int
    body: Dict[str, Any]

    @property
    def success(self) -> bool:
        return self.status_code == 200 and bool(self.body.get("success"))


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def build_unavailable_alert(window: ReportWindow, error: SourceUnavailableError) -> str:
    """Message broadcast when no Bacula data could be fetched."""
    tried = ", ".join(endpoint for endpoint, _ in error.failures) or "none"
    return (
        "⚠️ *Bacula daily report unavailable*\n\n"
        f"📅 Date: {window.label}\n"
        "The backup system could not be reached, so the daily report was not generated.\n"
        f"Endpoints tried: {tried}\n\n"
        "Please check the Bacula integration and the proxy service."
    )


class BaculaDailyReportRunner:
    """Runs the Bacula daily report for a template and its recipients."""

    def __init__(
        self,
        repos: ReportRepoBundle,
        functions: FunctionsClient,
        *,
        config: ReportConfig,
        cache: TTLCache,
        clock: Callable[[], datetime] = _utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._repos = repos
        self._config = config
        self._clock = clock
        self._fetcher = BaculaFetcher(
            functions,
            cache=cache,
            proxy_function=config.proxy_function,
            max_attempts=config.fetch_max_attempts,
            backoff_seconds=config.fetch_backoff_seconds,
            sleep=sleep,
        )
        self._notifier = WhatsAppNotifier(functions, send_function=config.send_function)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def run(self, request: ReportRunRequest) -> RunOutcome:
        """Handle a report run request end to end."""
        started = time.perf_counter()
        try:
            template = await self._resolve_template(request.report_id)
            recipients = await self._resolve_recipients(template, request)
            if not recipients:
                logger.info("No active recipients for template %s; nothing sent", template.id)
                return RunOutcome(
                    200,
                    {
                        "success": True,
                        "message": f"No active recipients for template '{template.name}'",
                        "details": {
                            "recipients_attempted": 0,
                            "recipients_success": 0,
                            "execution_time_ms": _elapsed_ms(started),
                            "test_mode": request.test_mode,
                            "template_name": template.name,
                        },
                        "results": [],
                    },
                )
            return await self._deliver(template, recipients, test_mode=request.test_mode, started=started)
        except ReportError as e:
            return self._failure(e, started)
        except Exception as e:
            return self._unexpected_failure(e, started)

    async def execute(
        self,
        template: MessageTemplate,
        recipients: List[str],
        *,
        test_mode: bool = False,
        report_id: Optional[str] = None,
    ) -> RunOutcome:
        """Run the pipeline for an already resolved template and recipient list."""
        started = time.perf_counter()
        try:
            return await self._deliver(template, recipients, test_mode=test_mode, started=started, report_id=report_id)
        except ReportError as e:
            return self._failure(e, started)
        except Exception as e:
            return self._unexpected_failure(e, started)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def _resolve_template(self, template_id: Optional[str]) -> MessageTemplate:
        if template_id:
            template = await self._repos.templates.get_active(template_id)
            if template is None:
                raise ReportConfigurationError(f"Template '{template_id}' not found or inactive")
            return template
        template = await self._repos.templates.get_active_by_type(self._config.template_type)
        if template is None:
            raise ReportConfigurationError(f"No active template of type '{self._config.template_type}'")
        return template

    async def _resolve_recipients(self, template: MessageTemplate, request: ReportRunRequest) -> List[str]:
        if request.test_mode:
            if not request.phone_number:
                raise ReportConfigurationError("phone_number is required in test mode")
            return [request.phone_number]
        schedules = await self._repos.schedules.list_active_for_template(template.id)
        return [s.phone_number for s in schedules if s.phone_number]

    async def _resolve_instance(self) -> str:
        integration = await self._repos.integrations.get_active_by_type(MESSAGING_INTEGRATION_TYPE)
        if integration is None:
            raise ReportConfigurationError(f"No active '{MESSAGING_INTEGRATION_TYPE}' integration configured")
        return integration.instance_name or self._config.default_instance

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def _deliver(
        self,
        template: MessageTemplate,
        recipients: List[str],
        *,
        test_mode: bool,
        started: float,
        report_id: Optional[str] = None,
    ) -> RunOutcome:
        instance_name = await self._resolve_instance()
        window = previous_day_window(self._clock(), self._config.timezone)

        try:
            fetched = await self._fetcher.fetch(window.key)
        except SourceUnavailableError as e:
            await self._broadcast_unavailable(
                template, recipients, instance_name, window, e, started=started, report_id=report_id
            )
            raise

        jobs = [j for j in normalize_jobs(fetched.payload) if window.contains(job_timestamp(j, window.tz))]
        report = build_report(jobs, window)
        message = self._render(template, report, window, test_mode=test_mode)

        results = await self._notifier.send_all(instance_name, recipients, message)
        success_count = sum(1 for r in results if r.success)
        success = success_count > 0
        elapsed = _elapsed_ms(started)

        await self._record(
            template,
            recipients,
            status="success" if success else "error",
            message_sent=success,
            message=message,
            results=results,
            summary=report.model_dump(),
            error_patterns=report.error_patterns(),
            error_details=None if success else "; ".join(r.error or "unknown error" for r in results),
            execution_time_ms=elapsed,
            report_id=report_id,
        )
        log_report_run(template.id, success, len(results), success_count, elapsed, test_mode=test_mode)
        logger.info(
            "Report '%s' sent to %s/%s recipients (%s jobs, source=%s, cache_hit=%s)",
            template.name,
            success_count,
            len(results),
            report.total_jobs,
            fetched.endpoint,
            fetched.cache_hit,
        )

        return RunOutcome(
            200,
            {
                "success": success,
                "message": (
                    f"Report sent to {success_count} of {len(results)} recipients"
                    if success
                    else f"Report could not be delivered to any of {len(results)} recipients"
                ),
                "details": {
                    "recipients_attempted": len(results),
                    "recipients_success": success_count,
                    "execution_time_ms": elapsed,
                    "test_mode": test_mode,
                    "template_name": template.name,
                    "cache_hit": fetched.cache_hit,
                    "source_endpoint": fetched.endpoint,
                    "report": report.model_dump(),
                },
                "results": [r.model_dump(exclude_none=True) for r in results],
            },
        )

    def _render(self, template: MessageTemplate, report: ReportData, window: ReportWindow, *, test_mode: bool) -> str:
        context = report.context()
        context.update(
            {
                "template_name": template.name,
                "subject": template.subject,
                "generated_at": self._clock().astimezone(window.tz).strftime("%d/%m/%Y %H:%M"),
            }
        )
        return render_template(
            template.body,
            context,
            conditions=report.conditions(test_mode=test_mode),
            lists=report.lists(),
            fallback=self._config.fallback_token,
        )

    async def _broadcast_unavailable(
        self,
        template: MessageTemplate,
        recipients: List[str],
        instance_name: str,
        window: ReportWindow,
        error: SourceUnavailableError,
        *,
        started: float,
        report_id: Optional[str],
    ) -> None:
        logger.error("Bacula data unavailable for %s: %s", window.key, error)
        log_error("SourceUnavailableError", str(error), {"window": window.key, "template_id": template.id})
        alert = build_unavailable_alert(window, error)
        results = await self._notifier.send_all(instance_name, recipients, alert)
        await self._record(
            template,
            recipients,
            status="error",
            message_sent=any(r.success for r in results),
            message=alert,
            results=results,
            summary=None,
            error_details=str(error),
            execution_time_ms=_elapsed_ms(started),
            report_id=report_id,
        )

    async def _record(
        self,
        template: MessageTemplate,
        recipients: List[str],
        *,
        status: str,
        message_sent: bool,
        message: str,
        results: List[SendResult],
        summary: Optional[Dict[str, Any]],
        error_details: Optional[str],
        execution_time_ms: int,
        report_id: Optional[str],
        error_patterns: Optional[Dict[str, int]] = None,
    ) -> None:
        log = ScheduledReportLog(
            report_id=report_id,
            user_id=template.user_id,
            phone_number=", ".join(recipients),
            execution_date=utc_now(),
            status=status,
            message_sent=message_sent,
            message_content=message[:MAX_LOGGED_MESSAGE_CHARS],
            error_details=error_details,
            execution_time_ms=execution_time_ms,
            whatsapp_response={
                "template_id": template.id,
                "results": [r.model_dump(exclude_none=True) for r in results],
                "summary": summary,
                "error_patterns": error_patterns or {},
            },
        )
        try:
            await self._repos.logs.create(log)
        except Exception as e:
            logger.error("Failed to write report log row: %s", e, exc_info=True)

    def _unexpected_failure(self, error: Exception, started: float) -> RunOutcome:
        logger.error("Report run aborted by unexpected error: %s", error, exc_info=True)
        log_error(type(error).__name__, str(error))
        return self._outcome_500(str(error), started)

    def _failure(self, error: ReportError, started: float) -> RunOutcome:
        logger.error("Report run failed: %s", error)
        return self._outcome_500(str(error), started)

    def _outcome_500(self, message: str, started: float) -> RunOutcome:
        return RunOutcome(
            500,
            {
                "success": False,
                "error": message,
                "execution_time_ms": _elapsed_ms(started),
                "timestamp": _utc_now().isoformat(),
            },
        )
