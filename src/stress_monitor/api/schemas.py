"""Request / response models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from stress_monitor.models import MonitoringState
from stress_monitor.session import SessionSnapshot


class ConnectRequest(BaseModel):
    address: str = Field(min_length=1)


class MonitoringResponse(BaseModel):
    monitoring_state: MonitoringState


class SessionResponse(BaseModel):
    session: SessionSnapshot
    suggestion: str | None = None
