"""
Database entity models.

Each module mirrors one BaaS table family:

- integrations: vendor connection credentials
- message_templates: WhatsApp message templates
- scheduled_reports: report schedules/recipients and their run logs
"""

from . import integrations, message_templates, scheduled_reports
from .integrations import Integration
from .message_templates import MessageTemplate
from .scheduled_reports import ScheduledReport, ScheduledReportLog

__all__ = [
    "Integration",
    "MessageTemplate",
    "ScheduledReport",
    "ScheduledReportLog",
    "integrations",
    "message_templates",
    "scheduled_reports",
]
