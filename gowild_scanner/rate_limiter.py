"""Minimum-interval rate limiter for scan batches"""

import math
import time
from typing import Callable, Optional

from loguru import logger

from .config import MIN_SCAN_INTERVAL
from .exceptions import RateLimitError

log = logger.bind(component="ratelimit")


class MinIntervalRateLimiter:
    """
    Rejects a scan batch issued too soon after the previous one.

    There is no queueing: a request inside the window is refused outright
    with the remaining wait, however many routes it would have scanned.
    """

    def __init__(
        self,
        min_interval: float = MIN_SCAN_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize rate limiter.

        Args:
            min_interval: Seconds that must pass between batches
            clock: Monotonic time source in seconds
        """
        self.min_interval = min_interval
        self.clock = clock
        self.last_scan: Optional[float] = None

        log.debug(f"Rate limiter initialized: one batch per {min_interval}s")

    def remaining(self) -> float:
        """Seconds left before the next batch is allowed (0 when allowed now)"""
        if self.last_scan is None:
            return 0.0
        return max(0.0, self.min_interval - (self.clock() - self.last_scan))

    def check(self) -> None:
        """
        Raises:
            RateLimitError: With retry_after rounded up to whole seconds
        """
        remaining = self.remaining()
        if remaining > 0:
            retry_after = math.ceil(remaining)
            log.warning(f"Scan batch rejected, retry in {retry_after}s")
            raise RateLimitError(retry_after)

    def mark(self) -> None:
        """Record that a batch starts now"""
        self.last_scan = self.clock()

    def acquire(self) -> None:
        """check() then mark()"""
        self.check()
        self.mark()
