"""Error types for the report pipeline.

Every error a report run maps to a 500 response derives from `ReportError`.
"""

from __future__ import annotations

from typing import List, Optional, Tuple


class ReportError(Exception):
    """Base error for all report pipeline failures."""


class ReportConfigurationError(ReportError):
    """Raised when a stored row the run depends on is missing or unusable."""


class SourceResponseError(ReportError):
    """Raised when the Bacula proxy answers with an error payload."""

    def __init__(self, endpoint: str, detail: object) -> None:
        super().__init__(f"Bacula proxy returned an error for '{endpoint}': {detail}")
        self.endpoint = endpoint
        self.detail = detail


class SourceUnavailableError(ReportError):
    """Raised when every fetch strategy has exhausted its retries.

    Args:
        failures: ``(endpoint, error message)`` pairs, one per strategy.
    """

    def __init__(self, failures: Optional[List[Tuple[str, str]]] = None) -> None:
        self.failures = list(failures or [])
        tried = ", ".join(endpoint for endpoint, _ in self.failures) or "none"
        last = self.failures[-1][1] if self.failures else "no strategy configured"
        super().__init__(f"Bacula data unavailable after trying endpoints [{tried}]: {last}")
