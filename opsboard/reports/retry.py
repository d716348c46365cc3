"""Linear retry helper for transient upstream failures."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from opsboard.core.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    backoff_seconds: float = 1.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    label: Optional[str] = None,
) -> T:
    """Run ``operation`` until it succeeds or ``max_attempts`` is reached.

    After the n-th failed attempt the helper waits ``backoff_seconds * n``
    before trying again. No wait follows the last attempt.

    Args:
        operation: Zero-argument coroutine factory.
        max_attempts: Total number of attempts, at least 1.
        backoff_seconds: Linear backoff unit.
        sleep: Awaitable sleep, replaceable in tests.
        label: Name used in log lines.

    Returns:
        The result of the first successful attempt.

    Raises:
        Exception: The error of the last attempt.
    """
    attempts = max(1, max_attempts)
    name = label or getattr(operation, "__name__", "operation")
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if attempt >= attempts:
                logger.warning("%s failed after %s attempts: %s", name, attempts, e)
                raise
            delay = backoff_seconds * attempt
            logger.info("%s attempt %s/%s failed (%s); retrying in %ss", name, attempt, attempts, e, delay)
            await sleep(delay)
    raise RuntimeError("unreachable")  # pragma: no cover
