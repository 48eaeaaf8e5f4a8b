"""Polling controller — fixed-interval sample → score → persist loop.

Lifecycle
~~~~~~~~~
``connect()`` probes the device and records the connection state.
``start()`` requires a CONNECTED device, spawns the poll task and moves the
session to RUNNING.  Every ``interval_ms`` one cycle runs:

1. Fetch a raw sample from the sensor client.
2. Score it with the active :class:`ScoringPolicy`.
3. Record it in the :class:`SessionState`.
4. Append a :class:`HistoryEntry` to the history store.

A sensor failure ends the loop with STOPPED_ON_ERROR and marks the
connection FAILED; there is no automatic retry.  ``stop()`` cancels the task
and returns to IDLE once any history write already under way has finished.

Only one fetch is ever in flight: the loop awaits each cycle before waiting
for the next tick, and ticks missed while a fetch overran are skipped.  Each
run carries an epoch, and a cycle from an older epoch never touches session
or history.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import Any

import structlog

from stress_monitor.errors import NotConnected, SensorError
from stress_monitor.models import (
    ConnectionResult,
    ConnectionState,
    HistoryEntry,
    MonitoringState,
    ScoredSample,
)
from stress_monitor.scoring.model import score_sample
from stress_monitor.scoring.policy import PRIMARY_POLICY, ScoringPolicy
from stress_monitor.sensors.base import BaseSensorClient, normalize_address
from stress_monitor.session import SessionState
from stress_monitor.storage.history import HistoryStore

logger = structlog.get_logger(__name__)

DEFAULT_INTERVAL_MS = 2000


class PollingController:
    """Owns the poll task and is the only writer of the monitoring state.

    Integration::

        controller = PollingController(client, session, history)
        await controller.connect("192.168.4.1")
        await controller.start()
        ...
        await controller.close()
    """

    def __init__(
        self,
        client: BaseSensorClient,
        session: SessionState,
        history: HistoryStore,
        policy: ScoringPolicy = PRIMARY_POLICY,
        interval_ms: int = DEFAULT_INTERVAL_MS,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self._client = client
        self._session = session
        self._history = history
        self._policy = policy
        self._interval = interval_ms / 1000.0
        self._task: asyncio.Task | None = None
        self._epoch = 0
        self._writes: set[asyncio.Future[bool]] = set()

        self._stats: dict[str, Any] = {
            "cycles": 0,
            "failures": 0,
            "skipped_ticks": 0,
            "last_cycle_at": None,
        }

    # ── Introspection ─────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def policy(self) -> ScoringPolicy:
        return self._policy

    @property
    def stats(self) -> dict[str, Any]:
        return dict(self._stats)

    # ── Connection ────────────────────────────────────────────

    async def connect(self, address: str) -> ConnectionResult:
        """Probe the device at *address*.  Stops monitoring first if running."""
        if self.is_running:
            await self.stop()
        base = normalize_address(address)
        self._session.set_connection(ConnectionState.CONNECTING, address=base)
        try:
            result = await self._client.test_connection(address)
        except Exception as exc:
            logger.exception("polling.connect_error", address=base)
            result = ConnectionResult(
                state=ConnectionState.FAILED,
                address=base,
                diagnostic=f"Connection test failed: {exc}",
            )
        self._session.set_connection(
            result.state, address=result.address, diagnostic=result.diagnostic
        )
        logger.info(
            "polling.connect",
            address=result.address,
            state=result.state.value,
            diagnostic=result.diagnostic or None,
        )
        return result

    # ── Lifecycle ─────────────────────────────────────────────

    async def start(self) -> None:
        """Start the periodic poll loop.

        Raises :class:`NotConnected` unless the last probe succeeded.
        """
        snapshot = self._session.snapshot()
        if snapshot.connection_state != ConnectionState.CONNECTED:
            raise NotConnected("Connect to the sensor device before starting monitoring.")
        if self.is_running:
            return

        self._epoch += 1
        self._session.set_monitoring(MonitoringState.RUNNING, diagnostic="")
        self._task = asyncio.create_task(self._run_loop(self._epoch, snapshot.device_address))
        logger.info(
            "polling.started",
            address=snapshot.device_address,
            interval_ms=int(self._interval * 1000),
            policy=self._policy.name,
        )

    async def stop(self) -> None:
        """Cancel the poll task and return to IDLE.  Idempotent."""
        task, self._task = self._task, None
        self._epoch += 1
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self._drain_writes()
        if self._session.snapshot().monitoring_state != MonitoringState.IDLE:
            self._session.set_monitoring(MonitoringState.IDLE)
            logger.info("polling.stopped")

    async def close(self) -> None:
        """Tear down: stop monitoring and release the sensor client."""
        await self.stop()
        await self._client.close()

    async def __aenter__(self) -> PollingController:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ── Main loop ─────────────────────────────────────────────

    async def _run_loop(self, epoch: int, address: str) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        try:
            while epoch == self._epoch:
                if not await self._cycle(epoch, address):
                    return

                next_tick += self._interval
                now = loop.time()
                if next_tick < now:
                    missed = int((now - next_tick) // self._interval) + 1
                    next_tick += missed * self._interval
                    self._stats["skipped_ticks"] += missed
                    logger.debug("polling.ticks_skipped", missed=missed)
                await asyncio.sleep(next_tick - now)
        except Exception as exc:
            logger.exception("polling.loop_error")
            if epoch == self._epoch:
                self._halt(f"Monitoring stopped unexpectedly: {exc}")

    async def _cycle(self, epoch: int, address: str) -> bool:
        """Run one fetch/score/persist cycle.  Returns ``False`` to end the loop."""
        try:
            sample = await self._client.fetch_sample(address)
        except SensorError as exc:
            if epoch == self._epoch:
                self._halt(str(exc))
            return False

        if epoch != self._epoch:
            logger.debug("polling.stale_sample_discarded")
            return False

        metrics, score, band = score_sample(sample, self._policy)
        scored = ScoredSample(sample=sample, metrics=metrics, score=score, band=band)
        snapshot = self._session.record(scored)

        self._stats["cycles"] += 1
        self._stats["last_cycle_at"] = datetime.now(UTC).isoformat()
        logger.debug("polling.cycle", score=round(score, 2), band=band.value)

        entry = HistoryEntry(
            user_name=snapshot.user.name,
            timestamp=scored.timestamp.isoformat(),
            stress_score=round(score),
        )
        # A recorded sample is always persisted, even if stop() lands mid-write.
        write = asyncio.ensure_future(self._history.append(entry))
        self._writes.add(write)
        write.add_done_callback(self._writes.discard)
        await asyncio.shield(write)
        return True

    async def _drain_writes(self) -> None:
        for write in list(self._writes):
            try:
                await write
            except Exception:
                logger.exception("polling.history_write_failed")

    def _halt(self, diagnostic: str) -> None:
        """Move to STOPPED_ON_ERROR.  The user has to reconnect and restart."""
        self._task = None
        self._stats["failures"] += 1
        self._session.set_connection(ConnectionState.FAILED, diagnostic=diagnostic)
        self._session.set_monitoring(MonitoringState.STOPPED_ON_ERROR, diagnostic=diagnostic)
        logger.warning("polling.cycle_failed", error=diagnostic)
