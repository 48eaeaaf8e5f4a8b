"""Durable, append-only stress history kept under one storage key.

The whole history is one JSON array (oldest first) stored under
``history_storage_key``.  History is advisory: storage failures are logged
and swallowed so they never interrupt monitoring.

Entries are validated one at a time.  An unreadable entry is skipped on load
but kept verbatim on append, and a payload that is not a JSON array is never
overwritten.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import TypeAdapter, ValidationError

from stress_monitor.errors import StorageUnavailable
from stress_monitor.models import HistoryEntry
from stress_monitor.storage.kv import KeyValueStorage

logger = structlog.get_logger(__name__)

DEFAULT_HISTORY_KEY = "stress_history"

_items_adapter = TypeAdapter(list[Any])


class HistoryStore:
    """Append-only log of :class:`HistoryEntry` records.

    Append is a read-modify-write of the stored array.  It is not atomic,
    which is fine while the polling cycle is the only writer.
    """

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_HISTORY_KEY) -> None:
        self._storage = storage
        self._key = key

    async def _read_items(self) -> list[Any] | None:
        """Raw stored items, or ``None`` when the payload is not a JSON array.

        Raises :class:`StorageUnavailable` if the read fails.
        """
        raw = await self._storage.get(self._key)
        if not raw:
            return []
        try:
            return _items_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning("history.corrupt", key=self._key, errors=exc.error_count())
            return None

    def _entries(self, items: list[Any]) -> list[HistoryEntry]:
        entries = []
        for index, item in enumerate(items):
            try:
                entries.append(HistoryEntry.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "history.corrupt_entry", key=self._key, index=index, errors=exc.error_count()
                )
        return entries

    async def load_all(self) -> list[HistoryEntry]:
        """Every readable entry in insertion order.  Unreadable history reads as empty."""
        try:
            items = await self._read_items()
        except StorageUnavailable as exc:
            logger.warning("history.load_failed", key=self._key, error=str(exc))
            return []
        return self._entries(items or [])

    async def load_for_user(self, user_name: str) -> list[HistoryEntry]:
        return [e for e in await self.load_all() if e.user_name == user_name]

    async def append(self, entry: HistoryEntry) -> bool:
        """Add *entry* at the end of the log.

        Returns ``False`` (after logging) when the read or the write failed,
        or when the stored payload could not be parsed.  Nothing already
        stored is ever dropped.
        """
        try:
            items = await self._read_items()
            if items is None:
                logger.warning("history.append_refused", key=self._key)
                return False
            items.append(entry.model_dump(mode="json", by_alias=True))
            await self._storage.set(self._key, _items_adapter.dump_json(items).decode())
        except StorageUnavailable as exc:
            logger.warning("history.append_failed", key=self._key, error=str(exc))
            return False
        logger.debug("history.appended", user=entry.user_name, score=entry.stress_score)
        return True
