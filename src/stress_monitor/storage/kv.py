"""Key-value persistence backends (``get(key)`` / ``set(key, value)``)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stress_monitor.errors import StorageUnavailable
from stress_monitor.storage.database import KeyValueRow, get_session_factory


class KeyValueStorage(ABC):
    """String-to-string store.  Backends raise :class:`StorageUnavailable`."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or ``None`` if the key was never set."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""


class SqlKeyValueStorage(KeyValueStorage):
    """Key-value rows in the SQLAlchemy ``key_value`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._external_factory = session_factory

    def _factory(self) -> async_sessionmaker[AsyncSession]:
        return self._external_factory or get_session_factory()

    async def get(self, key: str) -> str | None:
        try:
            async with self._factory()() as session:
                row = await session.get(KeyValueRow, key)
                return row.value if row is not None else None
        except (SQLAlchemyError, OSError) as exc:
            raise StorageUnavailable(f"Could not read {key!r}: {exc}") from exc

    async def set(self, key: str, value: str) -> None:
        try:
            async with self._factory()() as session:
                await session.merge(KeyValueRow(key=key, value=value))
                await session.commit()
        except (SQLAlchemyError, OSError) as exc:
            raise StorageUnavailable(f"Could not write {key!r}: {exc}") from exc


class InMemoryKeyValueStorage(KeyValueStorage):
    """Process-local storage for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value
