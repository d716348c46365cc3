"""Error types for the serverless-function client.

Usage:
- Catch `FunctionInvokeError` for any failed invocation and inspect
  `status_code` (None for transport failures) or `details`.
"""

from __future__ import annotations

from typing import Any, Optional


class FunctionInvokeError(Exception):
    """Raised when a serverless function cannot be invoked successfully.

    Args:
        message: Human-readable error description.
        function: Name of the function that was invoked.
        status_code: HTTP status code, when the function answered.
        details: Response body or underlying error, for diagnosis.
    """

    def __init__(
        self,
        message: str,
        *,
        function: str,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.function = function
        self.status_code = status_code
        self.details = details
