"""BaaS serverless-function client.

Public API:
- `FunctionsClient`: async client invoking functions by name.
- `FunctionInvokeError`: raised for failed invocations.
"""

from .client import FunctionsClient
from .errors import FunctionInvokeError

__all__ = ["FunctionInvokeError", "FunctionsClient"]
