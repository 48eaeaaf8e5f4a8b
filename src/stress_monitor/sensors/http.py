"""Live sensor client — polls the biometric device over its HTTP contract.

Device endpoints:
  ``GET /``      any 2xx proves basic reachability
  ``GET /data``  JSON object with numeric ``gsr``, ``temp`` and ``hrv``

Any non-2xx status or unparsable body is a hard failure for that request.
No retries happen here; reconnecting is an explicit user action.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from stress_monitor.errors import ConnectionUnreachable, MalformedResponse, SensorError
from stress_monitor.models import ConnectionResult, ConnectionState, RawSample
from stress_monitor.sensors.base import BaseSensorClient, address_problem, normalize_address

logger = structlog.get_logger(__name__)

ROOT_PATH = "/"
DATA_PATH = "/data"


class _DevicePayload(BaseModel):
    """Wire format of ``GET /data``.  Extra keys are ignored."""

    model_config = ConfigDict(strict=True, allow_inf_nan=False, extra="ignore")

    gsr: float
    temp: float
    hrv: float


class LiveSensorClient(BaseSensorClient):
    """Talks to the physical device through :mod:`httpx`.

    Usage::

        client = LiveSensorClient(timeout=5.0)
        result = await client.test_connection("192.168.4.1")
        if result.ok:
            sample = await client.fetch_sample("192.168.4.1")
    """

    mode = "live"

    def __init__(
        self,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    # ── Internal request wrapper ──────────────────────────────

    async def _get(self, url: str, error: type[SensorError]) -> httpx.Response:
        """GET *url*, translating every httpx failure into *error*."""
        try:
            resp = await self._http().get(url)
        except httpx.TimeoutException as exc:
            raise error(f"Timed out after {self._timeout:g}s waiting for {url}.") from exc
        except httpx.HTTPError as exc:
            raise error(f"Device at {url} is unreachable: {exc}") from exc
        except httpx.InvalidURL as exc:
            raise error(f"Invalid device URL {url}: {exc}") from exc

        if not resp.is_success:
            raise error(f"{url} answered HTTP {resp.status_code}.")
        return resp

    @staticmethod
    def _parse(url: str, resp: httpx.Response) -> RawSample:
        try:
            body: Any = resp.json()
        except ValueError as exc:
            raise MalformedResponse(f"Unexpected response from {url}: body is not JSON.") from exc

        try:
            payload = _DevicePayload.model_validate(body)
        except ValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
            detail = ", ".join(fields) if fields else "expected a JSON object"
            raise MalformedResponse(
                f"Unexpected response schema from {url}: missing or non-numeric {detail}."
            ) from exc

        return RawSample(gsr=payload.gsr, temperature_c=payload.temp, hrv_ms=payload.hrv)

    # ── Public API ────────────────────────────────────────────

    async def test_connection(self, address: str) -> ConnectionResult:
        base = normalize_address(address)
        problem = address_problem(base)
        if problem:
            logger.warning("live_sensor.invalid_address", address=base, error=problem)
            return ConnectionResult(state=ConnectionState.FAILED, address=base, diagnostic=problem)

        try:
            await self._get(base + ROOT_PATH, ConnectionUnreachable)
            data_url = base + DATA_PATH
            self._parse(data_url, await self._get(data_url, MalformedResponse))
        except SensorError as exc:
            logger.warning("live_sensor.probe_failed", address=base, error=str(exc))
            return ConnectionResult(state=ConnectionState.FAILED, address=base, diagnostic=str(exc))

        logger.info("live_sensor.connected", address=base)
        return ConnectionResult(state=ConnectionState.CONNECTED, address=base)

    async def fetch_sample(self, address: str) -> RawSample:
        base = normalize_address(address)
        problem = address_problem(base)
        if problem:
            raise MalformedResponse(problem)
        url = base + DATA_PATH
        sample = self._parse(url, await self._get(url, MalformedResponse))
        logger.debug(
            "live_sensor.sample",
            gsr=sample.gsr,
            temperature_c=sample.temperature_c,
            hrv_ms=sample.hrv_ms,
        )
        return sample

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
