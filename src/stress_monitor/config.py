"""Centralised application settings loaded from environment / .env file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_DEFAULT_DB_URL = f"sqlite+aiosqlite:///{_PROJECT_ROOT / 'data' / 'stress_monitor.db'}"


class Settings(BaseSettings):
    """All runtime configuration for the stress monitor.

    Values are read from environment variables first, then from a *.env* file
    located at the project root.  Every variable lives in a flat namespace,
    e.g. ``SENSOR_MODE=live`` or ``POLL_INTERVAL_MS=1000``.
    """

    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Sensor device ─────────────────────────────────────────
    sensor_mode: Literal["live", "simulated"] = "simulated"
    device_address: str = ""
    device_request_timeout: float = 5.0
    simulated_seed: int | None = None

    # ── Polling ───────────────────────────────────────────────
    poll_interval_ms: int = Field(default=2000, gt=0)
    recent_samples_limit: int = Field(default=10, gt=0)

    # ── Scoring ───────────────────────────────────────────────
    scoring_policy: Literal["primary", "overall"] = "primary"
    score_smoothing_alpha: float = Field(default=0.3, gt=0.0, le=1.0)

    # ── History storage ───────────────────────────────────────
    database_url: str = _DEFAULT_DB_URL
    history_storage_key: str = "stress_history"

    # ── User profile ──────────────────────────────────────────
    user_name: str = "Guest"
    user_age: str = ""

    # ── API server ────────────────────────────────────────────
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Return a cached :class:`Settings` singleton."""
    return Settings()
