"""
Storefront HTTP round-trip probes.

The cached variant requests the URL as-is; the uncached variant appends a
cache-defeating query parameter and no-cache headers on every iteration.
Anything but a 200 response is a measurement failure.
"""

from __future__ import annotations

import asyncio
import random
import time

import httpx

from ..constants import NO_CACHE_HEADERS
from ..diagnostics.checks import Check, CheckList
from ..diagnostics.probe import ProbeConfig, probe
from ..diagnostics.sampler import run_multiple_times
from ..exceptions import MeasurementFailedError
from .database import classify_latency


async def fetch_timed(
    client: httpx.AsyncClient,
    url: str,
    headers: dict[str, str] | None = None,
    timeout: float = 30.0,
) -> float:
    """GET `url` and return elapsed seconds; raises MeasurementFailedError.

    `timeout` bounds the whole request; httpx timeouts bound each read only.
    """
    start = time.perf_counter()
    try:
        response = await asyncio.wait_for(client.get(url, headers=headers), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise MeasurementFailedError(f"Request exceeded {timeout:g}s") from e
    except httpx.HTTPError as e:
        raise MeasurementFailedError(f"{type(e).__name__}: {e}") from e
    elapsed = time.perf_counter() - start
    if response.status_code != 200:
        raise MeasurementFailedError(f"HTTP {response.status_code}")
    return elapsed


def cache_busting_url(url: str, rng: random.Random | None = None) -> str:
    rng = rng or random
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}timestamp={int(time.time())}{rng.randint(1, 1000)}"


def uncached_headers(client: httpx.AsyncClient) -> dict[str, str]:
    agent = client.headers.get("User-Agent", "")
    return {**NO_CACHE_HEADERS, "User-Agent": f"{agent} (Uncached)".strip()}


@probe("HTTP cached")
async def check_http_cached(
    client: httpx.AsyncClient,
    url: str | None,
    config: ProbeConfig,
) -> CheckList:
    if not url:
        return [Check.warning("HTTP cached: no storefront URL available to test")]
    checks: CheckList = [Check.info(f"Testing URL: {url}")]
    stats = await run_multiple_times(
        fetch_timed,
        config.http_iterations,
        (client, url, None, config.http_timeout),
        show_individual=config.show_individual,
        label="HTTP cached request",
        checks=checks,
    )
    warning_ms, error_ms = config.thresholds.pair("http_cached_ms")
    checks.extend(classify_latency("HTTP (cached)", stats, warning_ms, error_ms))
    return checks


@probe("HTTP uncached")
async def check_http_uncached(
    client: httpx.AsyncClient,
    url: str | None,
    config: ProbeConfig,
) -> CheckList:
    if not url:
        return [Check.warning("HTTP uncached: no storefront URL available to test")]
    headers = uncached_headers(client)

    async def fetch_uncached() -> float:
        return await fetch_timed(client, cache_busting_url(url), headers, config.http_timeout)

    checks: CheckList = [Check.info(f"Testing URL (cache-busted): {url}")]
    stats = await run_multiple_times(
        fetch_uncached,
        config.http_iterations,
        show_individual=config.show_individual,
        label="HTTP uncached request",
        checks=checks,
    )
    warning_ms, error_ms = config.thresholds.pair("http_uncached_ms")
    checks.extend(classify_latency("HTTP (uncached)", stats, warning_ms, error_ms))
    return checks
