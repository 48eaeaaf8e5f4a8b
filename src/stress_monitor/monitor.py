"""Stress monitor facade — the single entry point for the presentation layer.

The UI forwards intents (connect, start, stop, select metric) here and
renders the :class:`SessionSnapshot` it gets back.  It never computes
scores itself.
"""

from __future__ import annotations

import statistics
from typing import Callable

import structlog

from stress_monitor.config import Settings, get_settings
from stress_monitor.models import (
    ConnectionResult,
    HistoryEntry,
    MetricAnalysis,
    MetricId,
    ScoredSample,
    UserProfile,
)
from stress_monitor.polling.controller import PollingController
from stress_monitor.relaxation import suggestion_for
from stress_monitor.scoring.policy import get_policy
from stress_monitor.sensors.base import BaseSensorClient
from stress_monitor.sensors.registry import get_sensor_client
from stress_monitor.session import SessionSnapshot, SessionState
from stress_monitor.storage.history import HistoryStore
from stress_monitor.storage.kv import KeyValueStorage, SqlKeyValueStorage

logger = structlog.get_logger(__name__)

# ── Metric analysis views ─────────────────────────────────────
# One entry per MetricId: (unit, description, value extractor).

_METRIC_VIEWS: dict[MetricId, tuple[str, str, Callable[[ScoredSample], float]]] = {
    MetricId.STRESS: (
        "score",
        "Composite stress score (0-100) fusing GSR, HRV and skin temperature.",
        lambda s: s.score,
    ),
    MetricId.TEMPERATURE: (
        "°C",
        "Skin temperature. Every degree away from 37 °C adds to the stress score.",
        lambda s: s.sample.temperature_c,
    ),
    MetricId.HRV: (
        "ms",
        "Heart-rate variability. Higher values indicate lower stress.",
        lambda s: s.sample.hrv_ms,
    ),
}


class StressMonitor:
    """Presentation boundary over the polling controller and history."""

    def __init__(
        self,
        controller: PollingController,
        session: SessionState,
        history: HistoryStore,
    ) -> None:
        self._controller = controller
        self._session = session
        self._history = history

    # ── Intents ───────────────────────────────────────────────

    async def connect(self, address: str) -> ConnectionResult:
        return await self._controller.connect(address)

    async def start_monitoring(self) -> None:
        await self._controller.start()

    async def stop_monitoring(self) -> None:
        await self._controller.stop()

    async def close(self) -> None:
        await self._controller.close()

    # ── Reads ─────────────────────────────────────────────────

    def get_session_state(self) -> SessionSnapshot:
        return self._session.snapshot()

    async def get_history(self, user_name: str | None = None) -> list[HistoryEntry]:
        """Stored history, oldest first, optionally for one user only."""
        if user_name:
            return await self._history.load_for_user(user_name)
        return await self._history.load_all()

    def relaxation_suggestion(self) -> str | None:
        return suggestion_for(self._session.snapshot().band)

    def select_metric_for_analysis(self, metric: MetricId | str) -> MetricAnalysis:
        """Summarise one metric over the recent-samples window.

        Raises :class:`ValueError` for an unknown metric id.
        """
        metric = MetricId(metric)
        unit, description, extract = _METRIC_VIEWS[metric]
        values = [extract(s) for s in self._session.snapshot().recent]
        if not values:
            return MetricAnalysis(metric=metric, unit=unit, description=description)
        return MetricAnalysis(
            metric=metric,
            unit=unit,
            description=description,
            samples=values,
            latest=values[-1],
            minimum=min(values),
            maximum=max(values),
            mean=statistics.fmean(values),
        )

    @property
    def stats(self) -> dict:
        return self._controller.stats


def build_monitor(
    settings: Settings | None = None,
    *,
    user: UserProfile | None = None,
    client: BaseSensorClient | None = None,
    storage: KeyValueStorage | None = None,
) -> StressMonitor:
    """Wire a :class:`StressMonitor` from settings.

    ``client`` and ``storage`` override the configured sensor client and the
    SQL key-value backend.
    """
    settings = settings or get_settings()
    user = user or UserProfile(name=settings.user_name, age=settings.user_age)
    session = SessionState(
        user,
        recent_limit=settings.recent_samples_limit,
        smoothing_alpha=settings.score_smoothing_alpha,
    )
    history = HistoryStore(storage or SqlKeyValueStorage(), key=settings.history_storage_key)
    sensor = client or get_sensor_client(settings)
    controller = PollingController(
        sensor,
        session,
        history,
        policy=get_policy(settings.scoring_policy),
        interval_ms=settings.poll_interval_ms,
    )
    logger.info(
        "monitor.built",
        sensor_mode=sensor.mode,
        policy=settings.scoring_policy,
        user=user.name,
    )
    return StressMonitor(controller, session, history)
