"""Async client for the BaaS serverless-function endpoint.

Every function is exposed as ``POST {functions_url}/{name}`` and takes a JSON
body. Requests authenticate with the service role key, sent both as a Bearer
token and as the ``apikey`` header.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from opsboard.server.core.config import FunctionsConfig

from .errors import FunctionInvokeError


class FunctionsClient:
    """Thin async HTTP client for serverless functions.

    Responsibilities
    ----------------
    - Build authenticated JSON requests for a named function.
    - Map non-2xx responses and transport failures to `FunctionInvokeError`.
    - Return the decoded JSON body, or ``{"raw": <text>}`` when the body is not JSON.
    """

    def __init__(
        self,
        base_url: str,
        *,
        service_key: Optional[str] = None,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Create a functions client.

        Args:
            base_url: Functions endpoint prefix, e.g. ``https://x.supabase.co/functions/v1``.
            service_key: Service role key used for authentication.
            timeout: Default HTTP timeout for the internal client.
            client: Optional preconfigured ``httpx.AsyncClient`` to use.
        """
        self.base_url = base_url.rstrip("/")
        self._service_key = service_key
        self._owns_client = client is None
        self._http = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: FunctionsConfig, *, client: Optional[httpx.AsyncClient] = None) -> "FunctionsClient":
        return cls(
            config.functions_url,
            service_key=config.service_role_key,
            timeout=config.timeout,
            client=client,
        )

    def _headers(self) -> Dict[str, str]:
        headers: Dict[str, str] = {"Content-Type": "application/json"}
        if self._service_key:
            headers["Authorization"] = f"Bearer {self._service_key}"
            headers["apikey"] = self._service_key
        return headers

    async def invoke(self, name: str, body: Optional[Dict[str, Any]] = None) -> Any:
        """Invoke a serverless function.

        API
        ---
        - Method/Path: ``POST {base_url}/{name}``
        - Body: ``body`` encoded as JSON

        Args:
            name: Function name, e.g. ``bacula-proxy``.
            body: JSON payload.

        Returns:
            The decoded JSON response, or ``{"raw": <text>}`` for non-JSON bodies.

        Raises:
            FunctionInvokeError: On non-2xx status or transport failure.
        """
        url = f"{self.base_url}/{name}"
        self._logger.debug("FunctionsClient.invoke: POST %s keys=%s", url, list((body or {}).keys()))
        try:
            r = await self._http.post(url, headers=self._headers(), json=body or {})
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FunctionInvokeError(
                f"Function '{name}' failed: {e.response.status_code}",
                function=name,
                status_code=e.response.status_code,
                details=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise FunctionInvokeError(
                f"Function '{name}' unreachable: {e}",
                function=name,
                details=str(e),
            ) from e
        try:
            return r.json()
        except ValueError:
            return {"raw": r.text}

    async def aclose(self) -> None:
        """Close the underlying HTTP client when this instance created it."""
        if self._owns_client:
            await self._http.aclose()
