"""
Scheduled report entity models.

This module contains the recipients table (``scheduled_reports``) and the run
history table (``scheduled_reports_logs``). A scheduled report points at a
message template through ``report_type`` and delivers it to one phone number
on a cron schedule.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field

from ..base import Base, new_id, utc_column, utc_now


class ScheduledReportBase(Base):
    """Base fields for a scheduled report."""

    user_id: Optional[str] = Field(default=None, description="Owning user")
    name: str = Field(description="Schedule name")
    report_type: str = Field(index=True, description="Id of the message template to send")
    phone_number: str = Field(description="Recipient phone number")
    cron_expression: str = Field(default="0 8 * * *", description="Five-field cron expression")
    is_active: bool = Field(default=True)


class ScheduledReport(ScheduledReportBase, table=True):
    """Persistent report schedule and recipient.

    Table: scheduled_reports
    """

    __tablename__ = "scheduled_reports"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    settings: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    last_execution: Optional[datetime] = Field(default=None, sa_column=utc_column(nullable=True))
    next_execution: Optional[datetime] = Field(default=None, sa_column=utc_column(index=True, nullable=True))
    execution_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now, sa_column=utc_column())
    updated_at: datetime = Field(default_factory=utc_now, sa_column=utc_column())

    def __repr__(self) -> str:
        return f"ScheduledReport(name={self.name}, report_type={self.report_type}, active={self.is_active})"


class ScheduledReportLog(Base, table=True):
    """One execution of the report pipeline.

    ``whatsapp_response`` keeps the raw per-recipient results together with the
    report summary.

    Table: scheduled_reports_logs
    """

    __tablename__ = "scheduled_reports_logs"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True)
    report_id: Optional[str] = Field(default=None, index=True, description="Schedule that triggered the run")
    user_id: Optional[str] = Field(default=None)
    phone_number: str = Field(default="", description="Recipients, comma separated")
    execution_date: datetime = Field(default_factory=utc_now, sa_column=utc_column(index=True))
    status: str = Field(description="success, error or skipped")
    message_sent: bool = Field(default=False)
    message_content: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    error_details: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    execution_time_ms: Optional[int] = Field(default=None)
    whatsapp_response: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=utc_now, sa_column=utc_column())
