"""Bacula source data fetching.

Data comes from the ``bacula-proxy`` serverless function, which forwards
``{endpoint, params}`` to the Bacula API. Several endpoints are tried in order
because older deployments do not expose all of them. Each endpoint is retried
with linear backoff, and the first one that returns data wins. Results are
cached per reporting window.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Sequence, Tuple

from opsboard.core.logging_config import get_logger
from opsboard.functions import FunctionsClient

from .cache import TTLCache
from .errors import SourceResponseError, SourceUnavailableError
from .retry import retry_with_backoff

logger = get_logger(__name__)


@dataclass(frozen=True)
class FetchStrategy:
    """One proxy endpoint and the query parameters sent with it."""

    endpoint: str
    params: Dict[str, Any] = field(default_factory=dict)


DEFAULT_STRATEGIES: Tuple[FetchStrategy, ...] = (
    FetchStrategy("jobs/last24h", {"limit": 1000}),
    FetchStrategy("jobs", {"age": 86400, "limit": 1000, "order_by": "jobid", "order_direction": "desc"}),
    FetchStrategy("jobs/recent", {"limit": 500}),
)


@dataclass(frozen=True)
class FetchResult:
    payload: Any
    endpoint: str
    cache_hit: bool = False


class BaculaFetcher:
    """Fetch Bacula jobs through the proxy function with fallback and caching."""

    def __init__(
        self,
        functions: FunctionsClient,
        *,
        cache: TTLCache,
        proxy_function: str = "bacula-proxy",
        strategies: Sequence[FetchStrategy] = DEFAULT_STRATEGIES,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._functions = functions
        self._cache = cache
        self._proxy_function = proxy_function
        self._strategies = tuple(strategies)
        self._max_attempts = max_attempts
        self._backoff_seconds = backoff_seconds
        self._sleep = sleep

    async def _call(self, strategy: FetchStrategy) -> Any:
        response = await self._functions.invoke(
            self._proxy_function,
            {"endpoint": strategy.endpoint, "params": dict(strategy.params)},
        )
        if isinstance(response, dict) and "error" in response:
            raise SourceResponseError(strategy.endpoint, response["error"])
        return response

    async def fetch(self, cache_key: str) -> FetchResult:
        """Return the job payload for ``cache_key``.

        Args:
            cache_key: Reporting-window identifier.

        Returns:
            A `FetchResult` holding the raw payload and the endpoint it came from.

        Raises:
            SourceUnavailableError: When every strategy failed.
        """
        cached = self._cache.get(cache_key)
        if cached is not None:
            payload, endpoint = cached
            logger.debug("Bacula data for %s served from cache (endpoint=%s)", cache_key, endpoint)
            return FetchResult(payload=payload, endpoint=endpoint, cache_hit=True)

        failures: List[Tuple[str, str]] = []
        for strategy in self._strategies:
            try:
                payload = await retry_with_backoff(
                    lambda s=strategy: self._call(s),
                    max_attempts=self._max_attempts,
                    backoff_seconds=self._backoff_seconds,
                    sleep=self._sleep,
                    label=f"bacula-proxy[{strategy.endpoint}]",
                )
            except Exception as e:
                logger.warning("Bacula endpoint %s exhausted: %s", strategy.endpoint, e)
                failures.append((strategy.endpoint, str(e)))
                continue
            logger.info("Bacula data fetched from %s", strategy.endpoint)
            self._cache.set(cache_key, (payload, strategy.endpoint))
            return FetchResult(payload=payload, endpoint=strategy.endpoint)

        raise SourceUnavailableError(failures)
