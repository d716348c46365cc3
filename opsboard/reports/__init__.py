"""Report pipeline.

The Bacula daily report is produced in stages, one module each: fetching
(`fetcher`), normalization (`normalize`), windowing (`window`), aggregation
(`aggregate`), rendering (`template`) and delivery (`notifier`). `runner`
composes them; `schedule` and `health` build on the runner and its run logs.
"""

from .aggregate import STATUS_TABLE, ReportData, build_report, classify_status
from .cache import TTLCache
from .errors import ReportConfigurationError, ReportError, SourceUnavailableError
from .formatting import format_bytes, format_percent
from .health import ReportHealth, ReportMetrics, summarize_health, summarize_metrics
from .runner import BaculaDailyReportRunner, ReportRunRequest, RunOutcome
from .schedule import ScheduledReportDispatcher, calculate_next_execution
from .template import render_template

__all__ = [
    "STATUS_TABLE",
    "BaculaDailyReportRunner",
    "ReportConfigurationError",
    "ReportData",
    "ReportError",
    "ReportHealth",
    "ReportMetrics",
    "ReportRunRequest",
    "RunOutcome",
    "ScheduledReportDispatcher",
    "SourceUnavailableError",
    "TTLCache",
    "build_report",
    "calculate_next_execution",
    "classify_status",
    "format_bytes",
    "format_percent",
    "render_template",
    "summarize_health",
    "summarize_metrics",
]
