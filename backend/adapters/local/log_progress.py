"""LogProgressAdapter — reports pipeline state transitions via logging."""

import logging
import threading
import time
from typing import Optional

from ports.progress import ProgressPort

logger = logging.getLogger(__name__)

TERMINAL_STAGES = ("done", "aborting")


class LogProgressAdapter(ProgressPort):
    """Logs each stage; terminal stages include the job's total elapsed time."""

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._started: dict[str, float] = {}
        self._lock = threading.Lock()

    def report(
        self,
        job_id: str,
        stage: str,
        progress: float = 0.0,
        detail: Optional[str] = None,
    ) -> None:
        now = self._clock()
        with self._lock:
            started = self._started.setdefault(job_id, now)
            if stage in TERMINAL_STAGES:
                self._started.pop(job_id, None)

        msg = f"[{job_id}] {stage}"
        if progress > 0:
            msg += f" {progress:.0%}"
        if detail:
            msg += f" - {detail}"
        if stage in TERMINAL_STAGES:
            msg += f" ({now - started:.2f}s)"

        if stage == "aborting":
            logger.warning(msg)
        else:
            logger.info(msg)
