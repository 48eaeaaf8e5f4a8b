"""Shared Pydantic models used across the monitor."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# ── Enums ─────────────────────────────────────────────────────


class StressBand(str, Enum):
    """Qualitative classification of a composite stress score."""
    NORMAL = "normal"
    MODERATE = "moderate"
    HIGH = "high"


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class MonitoringState(str, Enum):
    """Lifecycle of the polling loop.  Written only by the polling controller."""
    IDLE = "idle"
    RUNNING = "running"
    STOPPED_ON_ERROR = "stopped_on_error"


class MetricId(str, Enum):
    """Metrics the dashboard can open an analysis view for."""
    STRESS = "stress"
    TEMPERATURE = "temperature"
    HRV = "hrv"


# ── Sensor data ───────────────────────────────────────────────


class RawSample(BaseModel):
    """One raw reading from the sensor device."""
    model_config = ConfigDict(frozen=True)

    gsr: float  # ADC units, 0-1023
    temperature_c: float
    hrv_ms: float


class NormalizedMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    gsr_pct: float
    hrv_stress_pct: float
    temp_contribution: float


class ScoredSample(BaseModel):
    """A raw sample together with everything derived from it in one cycle."""
    model_config = ConfigDict(frozen=True)

    sample: RawSample
    metrics: NormalizedMetrics
    score: float
    band: StressBand
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ConnectionResult(BaseModel):
    """Outcome of a device reachability probe."""
    model_config = ConfigDict(frozen=True)

    state: ConnectionState
    address: str
    diagnostic: str = ""

    @property
    def ok(self) -> bool:
        return self.state == ConnectionState.CONNECTED


# ── Persistence ───────────────────────────────────────────────


class HistoryEntry(BaseModel):
    """A persisted (user, timestamp, score) record.  Never mutated."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_name: str = Field(alias="userName")
    timestamp: str  # ISO-8601
    stress_score: int = Field(alias="stressScore")


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    age: str = ""


# ── Analysis ──────────────────────────────────────────────────


class MetricAnalysis(BaseModel):
    """Summary of one metric over the recent-samples window."""
    metric: MetricId
    unit: str
    description: str
    samples: list[float] = Field(default_factory=list)
    latest: float | None = None
    minimum: float | None = None
    maximum: float | None = None
    mean: float | None = None
