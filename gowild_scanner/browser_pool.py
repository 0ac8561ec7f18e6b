"""Bounded pool of browser slots"""

import asyncio
from contextlib import asynccontextmanager

from loguru import logger

from .config import MAX_BROWSERS

log = logger.bind(component="pool")


class BrowserSlotPool:
    """
    Limits how many browsers may run at once.

    A slot is held for exactly the lifetime of one browser; waiters are
    woken in roughly FIFO order by the underlying semaphore.
    """

    def __init__(self, size: int = MAX_BROWSERS):
        if size < 1:
            raise ValueError(f"Browser pool size must be at least 1, got {size}")
        self.size = size
        self.active = 0
        self.peak = 0
        self._semaphore = asyncio.Semaphore(size)

        log.debug(f"Browser pool initialized: {size} slots")

    @property
    def available(self) -> int:
        return self.size - self.active

    @asynccontextmanager
    async def slot(self):
        """Hold one slot for the duration of the block, released on any exit"""
        if self.active >= self.size:
            log.debug(f"All {self.size} browser slots busy, waiting...")

        async with self._semaphore:
            self.active += 1
            self.peak = max(self.peak, self.active)
            try:
                yield
            finally:
                self.active -= 1
