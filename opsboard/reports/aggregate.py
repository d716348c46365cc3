"""Bacula report aggregation.

Turns the jobs of one reporting window into the figures rendered in the daily
message: status counts, rates, per-client and per-level breakdowns, totals and
the two detail lists templates can iterate over.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from .formatting import format_bytes, format_percent
from .normalize import BaculaJob
from .window import ReportWindow, job_timestamp

CRITICAL = "critical"
WARNING = "warning"
INFO = "info"
UNKNOWN = "unknown"

STATUS_TABLE: Dict[str, str] = {
    "E": CRITICAL,
    "e": CRITICAL,
    "f": CRITICAL,
    "W": WARNING,
    "A": WARNING,
    "I": WARNING,
    "T": INFO,
}

STATUS_DESCRIPTIONS: Dict[str, str] = {
    "T": "Completed successfully",
    "E": "Terminated with errors",
    "e": "Non-fatal error",
    "f": "Fatal error",
    "W": "Terminated with warnings",
    "A": "Canceled by user",
    "I": "Incomplete",
}

LEVEL_NAMES: Dict[str, str] = {
    "F": "Full",
    "I": "Incremental",
    "D": "Differential",
    "V": "Verify",
}


def classify_status(code: Optional[str]) -> str:
    """Severity of a Bacula job status code; anything unlisted is ``unknown``."""
    return STATUS_TABLE.get(code or "", UNKNOWN)


class ClientStats(BaseModel):
    total_jobs: int = 0
    success_jobs: int = 0
    error_jobs: int = 0
    warning_jobs: int = 0
    total_bytes: int = 0


class ErrorDetail(BaseModel):
    """One failed job, as listed by ``{{#each error_details}}``."""

    job_id: str
    job_name: str
    client: str
    level: str
    status: str
    status_description: str
    start_time: str
    errors: int


class ClientAnalysis(BaseModel):
    """One client row, as listed by ``{{#each client_analysis}}``."""

    client: str
    total_jobs: int
    success_jobs: int
    error_jobs: int
    warning_jobs: int
    success_rate: int
    total_bytes: str


class ReportData(BaseModel):
    """Aggregate of one reporting window."""

    date: str
    timezone: str
    total_jobs: int = 0
    error_jobs: int = 0
    warning_jobs: int = 0
    success_jobs: int = 0
    unknown_jobs: int = 0
    error_rate: int = 0
    success_rate: int = 0
    total_bytes: int = 0
    total_bytes_formatted: str = "0 B"
    total_files: int = 0
    client_count: int = 0
    clients: Dict[str, ClientStats] = Field(default_factory=dict)
    job_types: Dict[str, int] = Field(default_factory=dict)
    error_details: List[ErrorDetail] = Field(default_factory=list)
    client_analysis: List[ClientAnalysis] = Field(default_factory=list)

    def conditions(self, *, test_mode: bool = False) -> Dict[str, bool]:
        """Truth values of the template ``{{#if}}`` conditions."""
        return {
            "has_errors": self.error_jobs > 0,
            "has_warnings": self.warning_jobs > 0,
            "has_jobs": self.total_jobs > 0,
            "all_successful": self.total_jobs > 0 and self.success_jobs == self.total_jobs,
            "test_mode": test_mode,
        }

    def lists(self) -> Dict[str, List[Dict[str, Any]]]:
        """Item lists available to ``{{#each}}`` blocks."""
        return {
            "error_details": [d.model_dump() for d in self.error_details],
            "client_analysis": [c.model_dump() for c in self.client_analysis],
        }

    def error_patterns(self) -> Dict[str, int]:
        """Failed jobs counted by status description."""
        patterns: Dict[str, int] = {}
        for detail in self.error_details:
            patterns[detail.status_description] = patterns.get(detail.status_description, 0) + 1
        return patterns

    def context(self) -> Dict[str, Any]:
        """Flat placeholder values."""
        return {
            "date": self.date,
            "timezone": self.timezone,
            "total_jobs": self.total_jobs,
            "error_jobs": self.error_jobs,
            "warning_jobs": self.warning_jobs,
            "success_jobs": self.success_jobs,
            "unknown_jobs": self.unknown_jobs,
            "error_rate": self.error_rate,
            "success_rate": self.success_rate,
            "total_bytes": self.total_bytes_formatted,
            "total_bytes_raw": self.total_bytes,
            "total_files": self.total_files,
            "client_count": self.client_count,
        }


def _format_moment(moment: Optional[datetime], window: ReportWindow) -> str:
    if moment is None:
        return "N/A"
    return moment.astimezone(window.tz).strftime("%d/%m/%Y %H:%M")


def build_report(jobs: Iterable[BaculaJob], window: ReportWindow) -> ReportData:
    """Aggregate the jobs of ``window``.

    The caller is expected to have filtered ``jobs`` to the window already.
    """
    report = ReportData(date=window.label, timezone=window.tz.key)
    for job in jobs:
        severity = classify_status(job.jobstatus)
        report.total_jobs += 1
        report.total_bytes += max(job.jobbytes, 0)
        report.total_files += max(job.jobfiles, 0)

        client_name = job.client or "unknown"
        stats = report.clients.setdefault(client_name, ClientStats())
        stats.total_jobs += 1
        stats.total_bytes += max(job.jobbytes, 0)

        level = LEVEL_NAMES.get(job.level or "", job.level or "unknown")
        report.job_types[level] = report.job_types.get(level, 0) + 1

        if severity == CRITICAL:
            report.error_jobs += 1
            stats.error_jobs += 1
        elif severity == WARNING:
            report.warning_jobs += 1
            stats.warning_jobs += 1
        elif severity == INFO:
            report.success_jobs += 1
            stats.success_jobs += 1
        else:
            report.unknown_jobs += 1

        if severity == CRITICAL:
            report.error_details.append(
                ErrorDetail(
                    job_id=str(job.jobid) if job.jobid is not None else "N/A",
                    job_name=job.display_name,
                    client=client_name,
                    level=level,
                    status=job.jobstatus or "?",
                    status_description=STATUS_DESCRIPTIONS.get(job.jobstatus or "", "Unknown status"),
                    start_time=_format_moment(job_timestamp(job, window.tz), window),
                    errors=job.joberrors,
                )
            )

    report.error_rate = format_percent(report.error_jobs, report.total_jobs)
    report.success_rate = format_percent(report.success_jobs, report.total_jobs)
    report.total_bytes_formatted = format_bytes(report.total_bytes)
    report.client_count = len(report.clients)
    report.client_analysis = [
        ClientAnalysis(
            client=name,
            total_jobs=stats.total_jobs,
            success_jobs=stats.success_jobs,
            error_jobs=stats.error_jobs,
            warning_jobs=stats.warning_jobs,
            success_rate=format_percent(stats.success_jobs, stats.total_jobs),
            total_bytes=format_bytes(stats.total_bytes),
        )
        for name, stats in sorted(report.clients.items())
    ]
    return report
