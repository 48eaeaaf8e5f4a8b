"""Sensor clients — live HTTP device and simulated generator."""

from stress_monitor.sensors.base import BaseSensorClient, address_problem, normalize_address
from stress_monitor.sensors.http import LiveSensorClient
from stress_monitor.sensors.registry import available_modes, get_sensor_client, register_sensor
from stress_monitor.sensors.simulated import SimulatedSensorClient

__all__ = [
    "BaseSensorClient",
    "LiveSensorClient",
    "SimulatedSensorClient",
    "address_problem",
    "available_modes",
    "get_sensor_client",
    "normalize_address",
    "register_sensor",
]
