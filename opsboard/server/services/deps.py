"""
Report Service Dependency.

Provides a singleton instance of the ReportService for API endpoints.
"""

from typing import Annotated

from fastapi import Depends

from opsboard.server.services.report_service import ReportService, get_report_service

ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
