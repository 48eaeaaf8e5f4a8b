"""FastAPI application — JSON surface over the stress monitor for the mobile UI.

Endpoints mirror the presentation boundary: connect, start/stop monitoring,
read session state and history, open a metric analysis, and browse the
relaxation content.  The monitor is built on startup and closed on shutdown
so no poll task outlives the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Callable

import structlog
from fastapi import FastAPI, HTTPException, Request

from stress_monitor.api.schemas import ConnectRequest, MonitoringResponse, SessionResponse
from stress_monitor.config import get_settings
from stress_monitor.errors import NotConnected
from stress_monitor.models import ConnectionResult, HistoryEntry, MetricAnalysis, MetricId
from stress_monitor.monitor import StressMonitor, build_monitor
from stress_monitor.relaxation import EXERCISES, RelaxationExercise, get_exercise
from stress_monitor.storage.database import dispose_engine, init_db

logger = structlog.get_logger(__name__)


def create_app(monitor_factory: Callable[[], StressMonitor] | None = None) -> FastAPI:
    """Build the API.  ``monitor_factory`` replaces the settings-driven wiring."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup / shutdown lifecycle hooks."""
        settings = get_settings()
        if monitor_factory is None:
            await init_db()
            logger.info("server.db_ready")
            monitor = build_monitor(settings)
        else:
            monitor = monitor_factory()
        app.state.monitor = monitor

        if monitor_factory is None and settings.device_address:
            await monitor.connect(settings.device_address)

        logger.info("server.started", port=settings.api_port)

        yield  # ← application runs

        await monitor.close()
        if monitor_factory is None:
            await dispose_engine()
        logger.info("server.stopped")

    app = FastAPI(
        title="Stress Monitor API",
        description="Biometric acquisition and stress scoring for the mobile dashboard.",
        lifespan=lifespan,
    )

    def _monitor(request: Request) -> StressMonitor:
        monitor = getattr(request.app.state, "monitor", None)
        if monitor is None:
            raise HTTPException(503, "Monitor not ready.")
        return monitor

    # ── Health ────────────────────────────────────────────────

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    # ── Device & monitoring ───────────────────────────────────

    @app.post("/connect", response_model=ConnectionResult)
    async def connect(req: ConnectRequest, request: Request):
        return await _monitor(request).connect(req.address)

    @app.post("/monitoring/start", response_model=MonitoringResponse)
    async def start_monitoring(request: Request):
        monitor = _monitor(request)
        try:
            await monitor.start_monitoring()
        except NotConnected as exc:
            raise HTTPException(409, str(exc)) from exc
        return MonitoringResponse(monitoring_state=monitor.get_session_state().monitoring_state)

    @app.post("/monitoring/stop", response_model=MonitoringResponse)
    async def stop_monitoring(request: Request):
        monitor = _monitor(request)
        await monitor.stop_monitoring()
        return MonitoringResponse(monitoring_state=monitor.get_session_state().monitoring_state)

    @app.get("/session", response_model=SessionResponse)
    async def session(request: Request):
        monitor = _monitor(request)
        return SessionResponse(
            session=monitor.get_session_state(),
            suggestion=monitor.relaxation_suggestion(),
        )

    @app.get("/stats")
    async def stats(request: Request):
        return _monitor(request).stats

    # ── History & analysis ────────────────────────────────────

    @app.get("/history", response_model=list[HistoryEntry], response_model_by_alias=True)
    async def history(request: Request, user: str | None = None):
        return await _monitor(request).get_history(user)

    @app.get("/analysis/{metric}", response_model=MetricAnalysis)
    async def analysis(metric: MetricId, request: Request):
        return _monitor(request).select_metric_for_analysis(metric)

    # ── Relaxation hub ────────────────────────────────────────

    @app.get("/relaxation", response_model=list[RelaxationExercise])
    async def relaxation():
        return list(EXERCISES)

    @app.get("/relaxation/{title}", response_model=RelaxationExercise)
    async def relaxation_exercise(title: str):
        try:
            return get_exercise(title)
        except KeyError:
            raise HTTPException(404, "Exercise not found.") from None

    return app


app = create_app()
