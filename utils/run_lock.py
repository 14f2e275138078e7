"""
Run-scoped mutual exclusion.

A lock file next to the dataset (or in settings.lock_dir) holds the PID
of the process running a cleanup. A second run waits up to the timeout
and then aborts with RunLockedError before touching any record.
"""

import hashlib
import os
import time
from pathlib import Path
from typing import Optional

import structlog

from exceptions import RunLockedError

logger = structlog.get_logger(__name__)

POLL_INTERVAL_SECONDS = 0.05


class RunLock:
    """
    Lock file guarding one dataset.

    Usage:
        with RunLock("catalog.xlsx", timeout_seconds=1.0):
            ...
    """

    def __init__(
        self,
        dataset: str,
        timeout_seconds: float = 1.0,
        lock_dir: Optional[str] = None,
    ):
        self.dataset = str(dataset)
        self.timeout_seconds = timeout_seconds

        path = Path(self.dataset)
        directory = Path(lock_dir) if lock_dir else path.resolve().parent
        digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:12]
        self.lock_path = directory / f".{path.name}.{digest}.lock"
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        """
        Create the lock file, waiting up to timeout_seconds.

        Raises:
            RunLockedError: If another live process keeps the lock
        """
        deadline = time.monotonic() + self.timeout_seconds
        self._clear_stale()

        while True:
            try:
                fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                if time.monotonic() >= deadline:
                    logger.warning(
                        "run_lock_busy",
                        dataset=self.dataset,
                        lock_path=str(self.lock_path)
                    )
                    raise RunLockedError(self.dataset, self.timeout_seconds)
                time.sleep(POLL_INTERVAL_SECONDS)
                continue

            with os.fdopen(fd, "w") as f:
                f.write(str(os.getpid()))
            self._held = True
            logger.debug("run_lock_acquired", lock_path=str(self.lock_path))
            return

    def release(self) -> None:
        """Remove the lock file if this instance holds it."""
        if not self._held:
            return
        self.lock_path.unlink(missing_ok=True)
        self._held = False
        logger.debug("run_lock_released", lock_path=str(self.lock_path))

    def _clear_stale(self) -> None:
        """Drop a lock file left behind by a process that no longer exists."""
        if not self.lock_path.exists():
            return
        try:
            pid = int(self.lock_path.read_text().strip())
        except (ValueError, OSError):
            return
        if pid == os.getpid():
            return
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            logger.info("run_lock_stale_removed", pid=pid, lock_path=str(self.lock_path))
            self.lock_path.unlink(missing_ok=True)
        except OSError:
            # Process exists but belongs to someone else
            pass

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
