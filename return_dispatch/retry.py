"""Bounded polling until the API returns something."""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Sequence, TypeVar

from .errors import RetryTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRY_INTERVAL_SECONDS = 1.0


async def retry_or_die(
    producer: Callable[[], Awaitable[Sequence[T]]],
    timeout: float,
    interval: float = RETRY_INTERVAL_SECONDS,
) -> Sequence[T]:
    """
    Call ``producer`` until it returns a non-empty sequence.

    Args:
        producer: Zero-argument coroutine function, called afresh every attempt
        timeout: Seconds since the first call after which polling gives up
        interval: Fixed delay between unsuccessful calls

    Returns:
        The first non-empty sequence produced

    Raises:
        RetryTimeoutError: If nothing was produced before the deadline.
            Exceptions raised by ``producer`` propagate unchanged.
    """
    start = time.monotonic()
    attempt = 0
    while True:
        attempt += 1
        result = await producer()
        if len(result) > 0:
            return result

        logger.debug("retry_or_die: attempt %d returned nothing", attempt)
        await asyncio.sleep(interval)

        if time.monotonic() - start > timeout:
            raise RetryTimeoutError(timeout)
