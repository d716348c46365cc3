"""
Report Endpoints.

This module exposes the report pipeline:

- the Bacula daily report run (manual or test-mode)
- processing of due scheduled reports
- the run-log health summary and run metrics

Run outcomes are returned as-is, with the status code chosen by the runner.
"""

from typing import Optional

from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse

from opsboard.core.logging_config import get_logger
from opsboard.reports import ReportHealth, ReportMetrics
from opsboard.server.schemas import (
    DispatchSummary,
    ReportRunErrorResponse,
    ReportRunRequest,
    ReportRunResponse,
)
from opsboard.server.services.deps import ReportServiceDep

logger = get_logger(__name__)
router = APIRouter()


@router.post(
    "/bacula/daily",
    summary="Send Bacula Daily Report",
    description=(
        "Build the Bacula report for the previous day and send it through WhatsApp, "
        "either to every active recipient of the template or, in test mode, to a single phone number."
    ),
    response_description="Run outcome with per-recipient results.",
    responses={
        200: {"model": ReportRunResponse},
        500: {"model": ReportRunErrorResponse},
    },
)
async def send_bacula_daily_report(
    service: ReportServiceDep,
    request_in: Optional[ReportRunRequest] = Body(default=None),
) -> JSONResponse:
    """
    Run the Bacula daily report.

    The response is 200 whenever the send step was reached, even if every
    recipient failed; check `success` and `results`. Configuration problems
    and an unreachable Bacula proxy return 500.
    """
    outcome = await service.run_daily_report(request_in or ReportRunRequest())
    return JSONResponse(status_code=outcome.status_code, content=outcome.body)


@router.post(
    "/scheduled/process",
    response_model=DispatchSummary,
    summary="Process Scheduled Reports",
    description="Run every active scheduled report whose next execution time has passed.",
    response_description="Summary of the executed schedules.",
)
async def process_scheduled_reports(service: ReportServiceDep):
    """
    Process due scheduled reports.

    Each due schedule is delivered to its own phone number. A failing schedule
    does not stop the others; it simply keeps its next execution time.
    """
    return await service.process_scheduled()


@router.get(
    "/health",
    response_model=ReportHealth,
    summary="Report Health",
    description="Summarize report runs of the last 24 hours.",
    response_description="Health status with recommendations.",
)
async def report_health(service: ReportServiceDep):
    """
    Report pipeline health.

    Rated `healthy` without failures, `warning` with fewer than three and
    `critical` otherwise.
    """
    return await service.health()


@router.get(
    "/metrics",
    response_model=ReportMetrics,
    summary="Report Metrics",
    description="Aggregate report runs of the last days, per day and per error pattern.",
    response_description="Run totals, daily breakdown and error patterns.",
)
async def report_metrics(
    service: ReportServiceDep,
    days: int = Query(default=7, ge=1, le=90, description="Number of days to cover"),
):
    """
    Report pipeline metrics.

    Daily buckets are keyed by UTC date.
    """
    return await service.metrics(days)
