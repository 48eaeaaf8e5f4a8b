"""Abstract base class for all sensor clients."""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx

from stress_monitor.models import ConnectionResult, RawSample

MAX_PORT = 65535


def normalize_address(address: str) -> str:
    """Turn a user-supplied host/IP into a base URL.

    ``"192.168.4.1"`` → ``"http://192.168.4.1"``; an explicit scheme is kept
    and trailing slashes / whitespace are dropped.
    """
    address = (address or "").strip().rstrip("/")
    if not address:
        return ""
    if "://" not in address:
        address = f"http://{address}"
    return address


def address_problem(base: str) -> str | None:
    """Diagnostic explaining why *base* is not a usable device URL.

    Returns ``None`` for a usable address.  *base* is the output of
    :func:`normalize_address`.
    """
    if not base:
        return "No device address given."
    try:
        url = httpx.URL(base)
    except httpx.InvalidURL as exc:
        return f"Invalid device address {base!r}: {exc}."
    if url.scheme not in ("http", "https") or not url.host:
        return f"Invalid device address {base!r}: expected http(s)://host[:port]."
    if url.port is not None and not 0 < url.port <= MAX_PORT:
        return f"Invalid device address {base!r}: port must be 1-{MAX_PORT}."
    return None


class BaseSensorClient(ABC):
    """Contract that every sensor source must implement.

    A sensor client probes the device and fetches single raw samples.  It
    holds no session state: connection and monitoring status belong to the
    polling controller.
    """

    mode: str

    @abstractmethod
    async def test_connection(self, address: str) -> ConnectionResult:
        """Probe the device once and report CONNECTED or FAILED.

        Never raises for device problems and never retries; the diagnostic
        on the result explains a failure.
        """

    @abstractmethod
    async def fetch_sample(self, address: str) -> RawSample:
        """Fetch one raw sample.

        Raises :class:`~stress_monitor.errors.MalformedResponse` when the
        request fails or the body lacks the expected numeric fields.
        """

    async def close(self) -> None:
        """Release any resources held by the client."""
