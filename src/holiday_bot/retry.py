from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from holiday_bot.holiday_client import RateLimitedError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_DELAY = 60.0


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = DEFAULT_MAX_DELAY,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``fn``, retrying only when the upstream API rate-limits us.

    The wait honours the server's Retry-After hint and otherwise doubles
    from ``base_delay``, capped at ``max_delay``. Other errors propagate
    on the first failure.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 1
    while True:
        try:
            return await fn()
        except RateLimitedError as exc:
            if attempt >= max_attempts:
                raise
            delay = exc.retry_after if exc.retry_after is not None else base_delay * 2 ** (attempt - 1)
            delay = min(delay, max_delay)
            LOGGER.warning(
                "Rate limited. Retrying in %.1fs (attempt %s/%s)",
                delay,
                attempt,
                max_attempts,
            )
            await sleep(delay)
            attempt += 1
