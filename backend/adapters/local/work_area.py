"""WorkArea — per-request scratch directory, removed on every exit path."""

import logging
import os
import shutil
import tempfile
import time

logger = logging.getLogger(__name__)


class WorkArea:
    """Exclusively-owned scratch directory for one request.

    Usable as a context manager. ``release()`` is idempotent: the pipeline and
    the streaming response may both call it.
    """

    def __init__(self, path: str):
        self.path = path
        self._released = False

    @classmethod
    def create(cls, root: str) -> "WorkArea":
        os.makedirs(root, exist_ok=True)
        prefix = f"{int(time.time() * 1000)}-"
        path = tempfile.mkdtemp(prefix=prefix, dir=root)
        logger.debug(f"Created work area {path}")
        return cls(path)

    @property
    def job_id(self) -> str:
        return os.path.basename(self.path)

    @property
    def released(self) -> bool:
        return self._released

    def file(self, name: str) -> str:
        return os.path.join(self.path, name)

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        try:
            shutil.rmtree(self.path)
            logger.debug(f"Removed work area {self.path}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Cleanup error for {self.path}: {e}")

    def __enter__(self) -> "WorkArea":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
