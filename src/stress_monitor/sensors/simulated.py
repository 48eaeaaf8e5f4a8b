"""Simulated sensor client — synthetic samples with no device attached.

Used for demos and development.  Given a seed the sequence is reproducible;
tests can also hand in a fixed script of samples.
"""

from __future__ import annotations

import math
import random
from collections import deque
from typing import Iterable

import structlog

from stress_monitor.errors import MalformedResponse
from stress_monitor.models import ConnectionResult, ConnectionState, RawSample
from stress_monitor.sensors.base import BaseSensorClient, address_problem, normalize_address

logger = structlog.get_logger(__name__)


class SimulatedSensorClient(BaseSensorClient):
    """Generate plausible GSR / skin temperature / HRV readings.

    GSR drifts on a slow sine with noise, temperature stays around 37 °C and
    HRV moves opposite to GSR, so the resulting score wanders across all
    three bands.
    """

    mode = "simulated"

    def __init__(
        self,
        seed: int | None = None,
        script: Iterable[RawSample] | None = None,
    ) -> None:
        self._rng = random.Random(seed)
        self._script: deque[RawSample] = deque(script or [])
        self._tick = 0

    async def test_connection(self, address: str) -> ConnectionResult:
        base = normalize_address(address)
        problem = address_problem(base)
        if problem:
            return ConnectionResult(state=ConnectionState.FAILED, address=base, diagnostic=problem)
        logger.info("simulated_sensor.connected", address=base)
        return ConnectionResult(state=ConnectionState.CONNECTED, address=base)

    async def fetch_sample(self, address: str) -> RawSample:
        problem = address_problem(normalize_address(address))
        if problem:
            raise MalformedResponse(problem)
        if self._script:
            return self._script.popleft()
        return self._generate()

    def _generate(self) -> RawSample:
        self._tick += 1
        phase = math.sin(self._tick / 6.0)  # -1..1
        gsr = 512 + 380 * phase + self._rng.uniform(-60, 60)
        temperature = 37.0 + 0.8 * phase + self._rng.uniform(-0.3, 0.3)
        hrv = 60 - 35 * phase + self._rng.uniform(-8, 8)
        return RawSample(
            gsr=round(min(max(gsr, 0.0), 1023.0)),
            temperature_c=round(min(max(temperature, 36.0), 38.5), 2),
            hrv_ms=round(min(max(hrv, 20.0), 100.0), 1),
        )
