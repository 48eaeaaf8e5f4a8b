"""In-memory session state read by the presentation layer.

State lives in a frozen :class:`SessionSnapshot`.  Every update builds a new
snapshot and swaps the reference in one assignment, so a renderer calling
:meth:`SessionState.snapshot` never sees a half-applied update.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from stress_monitor.models import (
    ConnectionState,
    MonitoringState,
    ScoredSample,
    StressBand,
    UserProfile,
)
from stress_monitor.scoring.model import smooth

DEFAULT_RECENT_LIMIT = 10


class SessionSnapshot(BaseModel):
    """Immutable view of everything the dashboard shows."""

    model_config = ConfigDict(frozen=True)

    user: UserProfile
    connection_state: ConnectionState = ConnectionState.DISCONNECTED
    monitoring_state: MonitoringState = MonitoringState.IDLE
    device_address: str = ""
    diagnostic: str = ""
    latest_score: float | None = None
    smoothed_score: float | None = None
    band: StressBand | None = None
    recent: tuple[ScoredSample, ...] = ()

    @property
    def latest(self) -> ScoredSample | None:
        return self.recent[-1] if self.recent else None


class SessionState:
    """Owner of the current on-screen values.

    ``recent`` is a ring buffer of the last ``recent_limit`` scored samples,
    oldest evicted first.
    """

    def __init__(
        self,
        user: UserProfile,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        smoothing_alpha: float = 1.0,
    ) -> None:
        if recent_limit < 1:
            raise ValueError("recent_limit must be at least 1")
        self._recent_limit = recent_limit
        self._alpha = smoothing_alpha
        self._snapshot = SessionSnapshot(user=user)

    def snapshot(self) -> SessionSnapshot:
        return self._snapshot

    def _replace(self, **changes) -> SessionSnapshot:
        self._snapshot = self._snapshot.model_copy(update=changes)
        return self._snapshot

    # ── Writers ───────────────────────────────────────────────

    def set_connection(
        self,
        state: ConnectionState,
        *,
        address: str | None = None,
        diagnostic: str = "",
    ) -> SessionSnapshot:
        changes: dict = {"connection_state": state, "diagnostic": diagnostic}
        if address is not None:
            changes["device_address"] = address
        return self._replace(**changes)

    def set_monitoring(self, state: MonitoringState, *, diagnostic: str | None = None) -> SessionSnapshot:
        changes: dict = {"monitoring_state": state}
        if diagnostic is not None:
            changes["diagnostic"] = diagnostic
        return self._replace(**changes)

    def record(self, scored: ScoredSample) -> SessionSnapshot:
        """Make *scored* the current reading and push it onto the ring buffer."""
        current = self._snapshot
        recent = (current.recent + (scored,))[-self._recent_limit:]
        return self._replace(
            latest_score=scored.score,
            smoothed_score=smooth(current.smoothed_score, scored.score, self._alpha),
            band=scored.band,
            recent=recent,
            diagnostic="",
        )
