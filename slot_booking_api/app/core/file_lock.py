"""
Advisory lock around the store document.

The lock is a sidecar marker file (``<store>.lock``) managed by
``filelock.AsyncSoftFileLock``.  Whoever creates the marker holds the
lock; everybody else polls until it disappears or the deadline passes.
The marker is created exclusively, so two contenders can never both
believe they own it, whether they are coroutines, threads or
cooperating processes on the same filesystem.

A marker left behind by a crashed holder is never taken over: the next
contender waits for the full timeout and fails with ``LockTimeout``.

Every acquisition uses its own ``AsyncSoftFileLock`` instance.  filelock
instances are re-entrant, so sharing one between coroutines would let
a second coroutine walk straight in.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional, Union

from filelock import AsyncSoftFileLock, Timeout

from .exceptions import LockTimeout

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.05
DEFAULT_TIMEOUT = 5.0


class FileLock:
    """Marker-file mutex with polling acquisition and a hard deadline."""

    def __init__(
        self,
        path: Union[str, Path],
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.path = Path(path)
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._held: Optional[AsyncSoftFileLock] = None

    @classmethod
    def for_store(cls, store_path: Union[str, Path], **kwargs) -> "FileLock":
        """Build the lock guarding ``store_path`` (marker at ``<store_path>.lock``)."""
        return cls(f"{store_path}.lock", **kwargs)

    def is_locked(self) -> bool:
        """Return True if a marker currently exists."""
        return self.path.exists()

    async def _acquire(self) -> AsyncSoftFileLock:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lock = AsyncSoftFileLock(str(self.path))
        try:
            await lock.acquire(timeout=self.timeout, poll_interval=self.poll_interval)
        except Timeout as exc:
            logger.warning("Timed out after %.3fs waiting for lock %s", self.timeout, self.path)
            raise LockTimeout(
                f"Could not acquire the store lock within {self.timeout:.3f}s",
                self.path,
            ) from exc
        return lock

    async def acquire(self) -> None:
        """Wait until the marker is absent, then create it.

        Raises
        ------
        LockTimeout
            If the marker is still present once ``timeout`` seconds have
            elapsed since the first attempt.
        """
        self._held = await self._acquire()

    async def release(self) -> None:
        """Remove the marker taken by ``acquire``.  Releasing twice is a no-op."""
        held, self._held = self._held, None
        if held is not None:
            await held.release()

    @asynccontextmanager
    async def hold(self) -> AsyncIterator["FileLock"]:
        """Hold the lock for the duration of the ``async with`` block."""
        lock = await self._acquire()
        try:
            yield self
        finally:
            await lock.release()
