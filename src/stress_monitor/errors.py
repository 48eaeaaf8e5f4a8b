"""Exception hierarchy shared by the sensor, polling and storage layers."""

from __future__ import annotations


class StressMonitorError(Exception):
    """Base class for every error raised by the monitor."""


class SensorError(StressMonitorError):
    """A request to the sensor device failed.  Halts monitoring."""


class ConnectionUnreachable(SensorError):
    """The device could not be reached (refused, DNS, timeout, non-2xx root)."""


class MalformedResponse(SensorError):
    """A sample request failed or returned a body without the expected fields."""


class NotConnected(StressMonitorError):
    """Monitoring was started without a successful ``connect()`` first."""


class StorageUnavailable(StressMonitorError):
    """The key-value persistence backend could not be read or written."""
