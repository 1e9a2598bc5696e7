"""
Errors raised by the record store.

Only infrastructure failures live here.  Business rule violations
(duplicate email, slot already booked, ...) are reported by the
services as ``ValueError`` or ``PermissionError`` and never reach this
hierarchy.  A record that simply does not exist is not an error at all:
lookups return ``None`` and update/delete report a no-op result.
"""

from pathlib import Path
from typing import Union


class StoreError(Exception):
    """Base class for record store failures."""

    def __init__(self, message: str, path: Union[str, Path, None] = None) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None


class LockTimeout(StoreError):
    """The lock marker was not released within the configured wait.

    Nothing has been read or written when this is raised, so callers may
    retry the whole higher-level operation.
    """


class StoreUnreadable(StoreError):
    """The store document exists but could not be read or parsed."""


class StoreUnwritable(StoreError):
    """The store document could not be written."""
