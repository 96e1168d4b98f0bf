"""Bounded polling for responses that arrive asynchronously (file drops)."""
import time
from typing import Callable, Optional, TypeVar

from x12gateway.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def poll_until(
    fetch: Callable[[], Optional[T]],
    timeout: float,
    interval: float,
    should_cancel: Optional[Callable[[], bool]] = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[T]:
    """
    Call fetch() until it returns something other than None.

    Gives up and returns None once timeout seconds have passed or
    should_cancel() turns true; the cancel check runs before every attempt.
    """
    if interval <= 0:
        raise ValueError("interval must be positive")
    deadline = clock() + timeout
    attempts = 0
    while True:
        if should_cancel is not None and should_cancel():
            logger.info("Polling cancelled", attempts=attempts)
            return None
        attempts += 1
        result = fetch()
        if result is not None:
            logger.debug("Polling succeeded", attempts=attempts)
            return result
        remaining = deadline - clock()
        if remaining <= 0:
            logger.info("Polling timed out", attempts=attempts, timeout=timeout)
            return None
        sleep(min(interval, remaining))
