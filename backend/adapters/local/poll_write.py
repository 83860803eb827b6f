"""PollingWriteWaiter — treats a file as flushed once its size stops changing.

The engine's exit is not fsync-backed, so a segment can still be growing when
the process reports completion.
"""

import logging
import os
import time
from typing import Callable, Optional

from ports.write_waiter import WriteWaiterPort

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_POLL_ATTEMPTS = 5


class PollingWriteWaiter(WriteWaiterPort):
    def __init__(
        self,
        interval: float = DEFAULT_POLL_INTERVAL,
        attempts: int = DEFAULT_POLL_ATTEMPTS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if attempts < 1:
            raise ValueError("attempts must be >= 1")
        self._interval = interval
        self._attempts = attempts
        self._sleep = sleep

    @staticmethod
    def _size(path: str) -> Optional[int]:
        try:
            return os.path.getsize(path)
        except OSError:
            return None

    def wait_until_stable(self, path: str) -> bool:
        previous = self._size(path)
        for attempt in range(self._attempts):
            self._sleep(self._interval)
            current = self._size(path)
            if current is not None and current == previous:
                return True
            previous = current
        logger.warning(f"{path} did not stabilize after {self._attempts} polls")
        return False
