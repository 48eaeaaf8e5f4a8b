"""Shared pytest fixtures."""

from __future__ import annotations

import asyncio
from typing import Callable, Iterable

import pytest

from stress_monitor.errors import StorageUnavailable
from stress_monitor.models import ConnectionResult, ConnectionState, RawSample, UserProfile
from stress_monitor.sensors.base import BaseSensorClient, normalize_address
from stress_monitor.session import SessionState
from stress_monitor.storage.history import HistoryStore
from stress_monitor.storage.kv import InMemoryKeyValueStorage, KeyValueStorage


class GatedSensorClient(BaseSensorClient):
    """Sensor whose fetches block until ``release`` is set.

    Tracks how many fetches are in flight at once.
    """

    mode = "gated"

    def __init__(self, samples: Iterable[RawSample], delay: float | None = None) -> None:
        self.samples = list(samples)
        self.delay = delay
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self.fetch_started = asyncio.Event()
        self.release = asyncio.Event()
        if delay is not None:
            self.release.set()

    async def test_connection(self, address: str) -> ConnectionResult:
        return ConnectionResult(state=ConnectionState.CONNECTED, address=normalize_address(address))

    async def fetch_sample(self, address: str) -> RawSample:
        sample = self.samples[min(self.calls, len(self.samples) - 1)]
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.fetch_started.set()
        try:
            await self.release.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        return sample

    async def close(self) -> None:
        self.closed = True


class BrokenStorage(KeyValueStorage):
    """Storage whose reads and/or writes always fail."""

    def __init__(self, fail_get: bool = True, fail_set: bool = True) -> None:
        self.fail_get = fail_get
        self.fail_set = fail_set
        self.writes: list[tuple[str, str]] = []

    async def get(self, key: str) -> str | None:
        if self.fail_get:
            raise StorageUnavailable("disk on fire")
        return None

    async def set(self, key: str, value: str) -> None:
        if self.fail_set:
            raise StorageUnavailable("disk on fire")
        self.writes.append((key, value))


class GatedStorage(InMemoryKeyValueStorage):
    """In-memory storage whose writes block until ``release`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.write_started = asyncio.Event()
        self.release = asyncio.Event()

    async def set(self, key: str, value: str) -> None:
        self.write_started.set()
        await self.release.wait()
        await super().set(key, value)


async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll *predicate* until it holds or *timeout* expires."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def calm_sample() -> RawSample:
    return RawSample(gsr=512, temperature_c=37.0, hrv_ms=50)


@pytest.fixture
def stressed_sample() -> RawSample:
    return RawSample(gsr=1023, temperature_c=39.0, hrv_ms=0)


@pytest.fixture
def user() -> UserProfile:
    return UserProfile(name="Ada", age="34")


@pytest.fixture
def session(user: UserProfile) -> SessionState:
    return SessionState(user)


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def history(storage: InMemoryKeyValueStorage) -> HistoryStore:
    return HistoryStore(storage)
