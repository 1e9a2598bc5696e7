"""
Single-file JSON record store.

The whole database is one JSON document mapping collection names to
lists of records::

    {"services": [...], "users": [...], "bookings": [...]}

Every public operation follows the same shape: acquire the file lock,
read the full document from disk, optionally mutate it in memory and
write it back, then release the lock.  Nothing is cached between
operations, so each one observes the latest committed state and the
``max(id) + 1`` identifier assignment cannot interleave with another
writer.

Collections need no declaration.  Reading an unknown collection yields
an empty list and the first write creates it.  The store manages three
fields on every record: ``id`` (assigned on creation, never changed),
``createdAt`` (set on creation) and ``updatedAt`` (refreshed by every
update, absent before the first one).

The store is an ordinary object.  Build one per data file, usually via
``JsonStore.from_settings``, and hand it to the services that need it.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .config import Settings
from .exceptions import StoreUnreadable, StoreUnwritable
from .file_lock import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT, FileLock

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Document = Dict[str, List[Record]]
Predicate = Callable[[Record], bool]

ID_FIELD = "id"
CREATED_FIELD = "createdAt"
UPDATED_FIELD = "updatedAt"

DEFAULT_COLLECTIONS = ("services", "users", "bookings")


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string with microseconds and a ``Z`` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def _numeric_id(value: Any) -> int:
    # Collections replaced wholesale may carry ids like "2" or None.
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return 0
    return 0


def next_id(records: List[Record]) -> int:
    return max((_numeric_id(r.get(ID_FIELD)) for r in records), default=0) + 1


def default_document() -> Document:
    return {name: [] for name in DEFAULT_COLLECTIONS}


class JsonStore:
    """Collection-oriented CRUD over one JSON file guarded by a ``FileLock``."""

    def __init__(
        self,
        path: Union[str, Path],
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.path = Path(path)
        self.lock = FileLock.for_store(self.path, poll_interval=poll_interval, timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "JsonStore":
        return cls(
            settings.resolve_data_path(),
            poll_interval=settings.lock_poll_interval_ms / 1000,
            timeout=settings.lock_timeout_ms / 1000,
        )

    def __repr__(self) -> str:
        return f"JsonStore({str(self.path)!r})"

    # ------------------------------------------------------------------
    # Document I/O.  Callers must hold ``self.lock``.
    # ------------------------------------------------------------------

    def read_document(self) -> Document:
        """Load the full document, creating the default one if the file is missing.

        An existing file is never overwritten here, even if it is empty
        or corrupt; that surfaces as ``StoreUnreadable`` instead.
        """
        if not self.path.exists():
            logger.info("Store %s does not exist, initializing", self.path)
            self.write_document(default_document())
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("Failed to read store %s: %s", self.path, exc)
            raise StoreUnreadable(f"Could not read the store document: {exc}", self.path) from exc
        if not isinstance(data, dict):
            logger.error("Store %s does not contain a JSON object", self.path)
            raise StoreUnreadable("The store document is not a JSON object", self.path)
        return data

    def write_document(self, document: Document) -> None:
        """Serialize ``document`` and replace the backing file in one step.

        The data goes to a temporary sibling first and is then moved over
        the target with ``os.replace`` so readers never see a half-written
        file.
        """
        tmp_name = None
        try:
            payload = json.dumps(document, indent=2, ensure_ascii=False)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("Failed to write store %s: %s", self.path, exc)
            raise StoreUnwritable(f"Could not write the store document: {exc}", self.path) from exc

    async def initialize(self) -> bool:
        """Create the store file with the default collections if it is absent.

        Returns True if the file was created, False if it already existed
        (in which case it is left untouched).
        """
        async with self.lock.hold():
            if self.path.exists():
                return False
            self.write_document(default_document())
            logger.info("Initialized store %s", self.path)
            return True

    async def reset(self) -> None:
        """Overwrite the store with empty default collections."""
        async with self.lock.hold():
            self.write_document(default_document())
            logger.info("Reset store %s", self.path)

    # ------------------------------------------------------------------
    # Collection operations
    # ------------------------------------------------------------------

    async def read_collection(self, name: str) -> List[Record]:
        """Return every record of ``name`` (an empty list for unknown collections)."""
        async with self.lock.hold():
            return self.read_document().get(name, [])

    async def replace_collection(self, name: str, items: List[Record]) -> List[Record]:
        """Overwrite collection ``name`` wholesale and return ``items``."""
        async with self.lock.hold():
            document = self.read_document()
            document[name] = list(items)
            self.write_document(document)
        logger.debug("Replaced collection %s with %d records", name, len(items))
        return items

    async def find_by_id(self, name: str, record_id: int) -> Optional[Record]:
        return await self.find_one(name, lambda r: r.get(ID_FIELD) == record_id)

    async def find_one(self, name: str, predicate: Predicate) -> Optional[Record]:
        """Return the first record matching ``predicate`` in collection order, or None."""
        items = await self.read_collection(name)
        return next((item for item in items if predicate(item)), None)

    async def find_many(self, name: str, predicate: Optional[Predicate] = None) -> List[Record]:
        items = await self.read_collection(name)
        if predicate is None:
            return items
        return [item for item in items if predicate(item)]

    async def create_record(self, name: str, fields: Record) -> Record:
        """Append a new record and return it with its ``id`` and ``createdAt``.

        Any ``id``, ``createdAt`` or ``updatedAt`` present in ``fields`` is
        ignored; those fields belong to the store.
        """
        async with self.lock.hold():
            document = self.read_document()
            record = self._append(document, name, fields)
            self.write_document(document)
        logger.debug("Created %s/%s", name, record[ID_FIELD])
        return record

    async def create_if_absent(
        self, name: str, predicate: Predicate, fields: Record
    ) -> Tuple[Record, bool]:
        """Create a record unless one matching ``predicate`` already exists.

        The existence check and the insert share one lock scope, so two
        concurrent callers cannot both pass the check.  Returns
        ``(new_record, True)`` on insert and ``(existing_record, False)``
        when a match was found; nothing is written in the latter case.
        """
        async with self.lock.hold():
            document = self.read_document()
            existing = next((item for item in document.get(name, []) if predicate(item)), None)
            if existing is not None:
                return existing, False
            record = self._append(document, name, fields)
            self.write_document(document)
        logger.debug("Created %s/%s", name, record[ID_FIELD])
        return record, True

    async def update_record(self, name: str, record_id: int, patch: Record) -> Optional[Record]:
        """Merge ``patch`` into record ``record_id`` and return the result.

        ``id`` and ``createdAt`` keep their stored values whatever the
        patch says, and ``updatedAt`` is refreshed.  Returns None, without
        touching the file, when no such record exists.
        """
        async with self.lock.hold():
            document = self.read_document()
            items = document.get(name, [])
            index = next((i for i, item in enumerate(items) if item.get(ID_FIELD) == record_id), None)
            if index is None:
                return None
            current = items[index]
            updated = {**current, **patch}
            updated[ID_FIELD] = current[ID_FIELD]
            if CREATED_FIELD in current:
                updated[CREATED_FIELD] = current[CREATED_FIELD]
            else:
                updated.pop(CREATED_FIELD, None)
            updated[UPDATED_FIELD] = utc_timestamp()
            items[index] = updated
            document[name] = items
            self.write_document(document)
        logger.debug("Updated %s/%s", name, record_id)
        return updated

    async def delete_record(self, name: str, record_id: int) -> bool:
        """Remove record ``record_id``.

        Returns True if a record was removed and False if there was
        nothing to delete; the file is not rewritten in that case.
        """
        async with self.lock.hold():
            document = self.read_document()
            items = document.get(name, [])
            index = next((i for i, item in enumerate(items) if item.get(ID_FIELD) == record_id), None)
            if index is None:
                return False
            del items[index]
            document[name] = items
            self.write_document(document)
        logger.debug("Deleted %s/%s", name, record_id)
        return True

    @staticmethod
    def _append(document: Document, name: str, fields: Record) -> Record:
        items = document.setdefault(name, [])
        record = {k: v for k, v in fields.items() if k not in (ID_FIELD, CREATED_FIELD, UPDATED_FIELD)}
        record[ID_FIELD] = next_id(items)
        record[CREATED_FIELD] = utc_timestamp()
        items.append(record)
        return record
