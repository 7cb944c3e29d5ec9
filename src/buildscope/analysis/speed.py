"""Network throughput measurement and download-time estimates."""

from __future__ import annotations

import logging
import math
import random
import re
import time
from collections.abc import Callable

import httpx

from buildscope.analysis.types import SpeedTestResult

logger = logging.getLogger(__name__)

DEFAULT_TEST_URL = "https://httpbin.org/bytes/1048576"
DEFAULT_TEST_BYTES = 1_048_576
MIN_THROUGHPUT_MBPS = 1.0
SIMULATED_RANGE_MBPS = (25.0, 75.0)

_NUMERIC_PREFIX = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_size_mb(total_size: str | None) -> float | None:
    """Leading numeric component of a free-form size string, e.g. ``"51.0 MB"``."""
    if not total_size:
        return None
    match = _NUMERIC_PREFIX.search(total_size)
    if match is None:
        return None
    value = float(match.group(0))
    if not math.isfinite(value):
        return None
    return value


def estimate_download_seconds(size_mb: float, throughput_mbps: float) -> float:
    return (size_mb * 8) / max(throughput_mbps, MIN_THROUGHPUT_MBPS)


def format_duration(seconds: float) -> str:
    whole = math.ceil(seconds)
    if whole < 60:
        return f"{whole} seconds"
    minutes, remainder = divmod(whole, 60)
    return f"{minutes}m {remainder}s"


def estimate_download_time(total_size: str | None, throughput_mbps: float) -> str | None:
    size_mb = parse_size_mb(total_size)
    if size_mb is None:
        return None
    return format_duration(estimate_download_seconds(size_mb, throughput_mbps))


class SpeedEstimator:
    """Times one uncached download of a fixed-size resource.

    Any failure substitutes a random placeholder in [25, 75) Mbps and marks
    the result as simulated. A simulated result carries no download estimate.
    """

    def __init__(
        self,
        url: str = DEFAULT_TEST_URL,
        size_bytes: int = DEFAULT_TEST_BYTES,
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.perf_counter,
        rng: random.Random | None = None,
    ) -> None:
        self.url = url
        self.size_bytes = size_bytes
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._clock = clock
        self._rng = rng or random.Random()

    async def _download(self) -> None:
        headers = {"Cache-Control": "no-cache", "Pragma": "no-cache"}
        async with httpx.AsyncClient(
            timeout=self._timeout_seconds, transport=self._transport
        ) as client:
            response = await client.get(self.url, headers=headers)
            response.raise_for_status()

    async def measure_throughput(self, total_size: str | None = None) -> SpeedTestResult:
        started = self._clock()
        try:
            await self._download()
        except Exception as exc:
            logger.warning("speed test download failed, using simulated value: %s", exc)
            low, high = SIMULATED_RANGE_MBPS
            simulated = low + self._rng.random() * (high - low)
            throughput = round(simulated, 1)
            # rounding may land exactly on the open upper bound
            if throughput >= high:
                throughput = math.floor(simulated * 10) / 10
            return SpeedTestResult(throughput_mbps=throughput, simulated=True)
        elapsed = max(self._clock() - started, 1e-6)
        size_mib = self.size_bytes / DEFAULT_TEST_BYTES
        measured = max((size_mib / elapsed) * 8, MIN_THROUGHPUT_MBPS)
        throughput = round(measured, 1)
        logger.info("speed test measured %.1f Mbps in %.3fs", throughput, elapsed)
        return SpeedTestResult(
            throughput_mbps=throughput,
            elapsed_seconds=round(elapsed, 3),
            estimated_download_time=estimate_download_time(total_size, throughput),
        )
