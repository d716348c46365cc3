"""
API Schemas.

Pydantic models documenting the request and response bodies of the report
endpoints.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from opsboard.reports.runner import ReportRunRequest


class SendResultOut(BaseModel):
    phone_number: str
    success: bool
    error: Optional[str] = None
    message_id: Optional[str] = None


class ReportRunDetails(BaseModel):
    recipients_attempted: int
    recipients_success: int
    execution_time_ms: int
    test_mode: bool
    template_name: str
    cache_hit: Optional[bool] = None
    source_endpoint: Optional[str] = None
    report: Optional[Dict[str, Any]] = None


class ReportRunResponse(BaseModel):
    """Body returned once the run reached the send step, or had no recipients."""

    success: bool
    message: str
    details: ReportRunDetails
    results: List[SendResultOut] = Field(default_factory=list)


class ReportRunErrorResponse(BaseModel):
    """Body returned on configuration errors or when the data source is unavailable."""

    success: bool = False
    error: str
    execution_time_ms: int
    timestamp: str


class DispatchResult(BaseModel):
    report_id: str
    name: str
    success: bool
    status_code: Optional[int] = None
    next_execution: Optional[str] = None
    error: Optional[str] = None


class DispatchSummary(BaseModel):
    executed_reports: int
    successful: int
    failed: int
    results: List[DispatchResult] = Field(default_factory=list)
    timestamp: str


__all__ = [
    "DispatchResult",
    "DispatchSummary",
    "ReportRunDetails",
    "ReportRunErrorResponse",
    "ReportRunRequest",
    "ReportRunResponse",
    "SendResultOut",
]
