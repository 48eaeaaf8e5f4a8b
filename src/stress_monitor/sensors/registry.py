"""Sensor registry — pick the live or simulated client from configuration."""

from __future__ import annotations

from typing import Callable

from stress_monitor.config import Settings
from stress_monitor.sensors.base import BaseSensorClient
from stress_monitor.sensors.http import LiveSensorClient
from stress_monitor.sensors.simulated import SimulatedSensorClient

# ── Registry ──────────────────────────────────────────────────

_REGISTRY: dict[str, Callable[[Settings], BaseSensorClient]] = {
    "live": lambda s: LiveSensorClient(timeout=s.device_request_timeout),
    "simulated": lambda s: SimulatedSensorClient(seed=s.simulated_seed),
}


def register_sensor(mode: str, factory: Callable[[Settings], BaseSensorClient]) -> None:
    """Register a factory for a new sensor mode."""
    _REGISTRY[mode] = factory


def get_sensor_client(settings: Settings) -> BaseSensorClient:
    """Instantiate the sensor client named by ``settings.sensor_mode``.

    Raises :class:`ValueError` if no client is registered for the mode.
    """
    factory = _REGISTRY.get(settings.sensor_mode)
    if factory is None:
        raise ValueError(
            f"No sensor client registered for {settings.sensor_mode!r}. "
            f"Available: {sorted(_REGISTRY)}"
        )
    return factory(settings)


def available_modes() -> list[str]:
    return sorted(_REGISTRY)
