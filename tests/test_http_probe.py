"""Tests for the storefront HTTP probes (httpx.MockTransport, no network)."""

import asyncio
import random
from dataclasses import replace

import httpx
import pytest

from storepulse.collaborators.http import build_http_client
from storepulse.diagnostics.checks import Check, Severity
from storepulse.exceptions import MeasurementFailedError
from storepulse.probes.http import (
    cache_busting_url,
    check_http_cached,
    check_http_uncached,
    fetch_timed,
    uncached_headers,
)

URL = "https://shop.example.com/women/tops.html"


def mock_client(status=200, seen=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, text="<html></html>")

    return httpx.AsyncClient(
        transport=httpx.MockTransport(handler),
        headers={"User-Agent": "StorePulse Performance Test"},
    )


class TestHelpers:
    def test_cache_busting_url(self):
        busted = cache_busting_url(URL, random.Random(1))
        assert busted.startswith(URL + "?timestamp=")
        assert busted.split("=")[1].isdigit()

    def test_cache_busting_url_existing_query(self):
        assert "?p=2&timestamp=" in cache_busting_url(URL + "?p=2")

    def test_uncached_headers(self):
        client = mock_client()
        headers = uncached_headers(client)
        assert headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
        assert headers["Pragma"] == "no-cache"
        assert headers["User-Agent"] == "StorePulse Performance Test (Uncached)"

    def test_build_http_client(self):
        client = build_http_client("Agent/1", connect_timeout=2, timeout=5)
        assert client.headers["User-Agent"] == "Agent/1"
        assert client.follow_redirects is True
        assert client.timeout.connect == 2
        assert client.timeout.read == 5


class TestFetchTimed:
    @pytest.mark.asyncio
    async def test_ok(self):
        async with mock_client() as client:
            assert await fetch_timed(client, URL) >= 0

    @pytest.mark.asyncio
    async def test_non_200_fails(self):
        async with mock_client(status=503) as client:
            with pytest.raises(MeasurementFailedError, match="HTTP 503"):
                await fetch_timed(client, URL)

    @pytest.mark.asyncio
    async def test_transport_error_fails(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(MeasurementFailedError, match="ConnectError"):
                await fetch_timed(client, URL)


class TestCachedProbe:
    @pytest.mark.asyncio
    async def test_no_url(self, probe_config):
        async with mock_client() as client:
            checks = await check_http_cached(client, None, probe_config)
        assert [c.severity for c in checks] == [Severity.WARNING]

    @pytest.mark.asyncio
    async def test_requests_plain_url(self, probe_config):
        seen = []
        async with mock_client(seen=seen) as client:
            checks = await check_http_cached(client, URL, probe_config)
        assert checks[0].message == f"Testing URL: {URL}"
        assert len(seen) == probe_config.http_iterations
        assert all(str(r.url) == URL for r in seen)
        assert checks[-1].severity == Severity.SUCCESS

    @pytest.mark.asyncio
    async def test_server_error_becomes_error_check(self, probe_config):
        async with mock_client(status=503) as client:
            checks = await check_http_cached(client, URL, probe_config)
        assert len(checks) == 1
        assert checks[0].severity == Severity.ERROR
        assert checks[0].message == "HTTP cached check error: HTTP 503"


class TestUncachedProbe:
    @pytest.mark.asyncio
    async def test_busts_cache_every_request(self, probe_config):
        seen = []
        async with mock_client(seen=seen) as client:
            checks = await check_http_uncached(client, URL, probe_config)
        assert len(seen) == probe_config.http_iterations
        for request in seen:
            assert "timestamp" in request.url.params
            assert request.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
            assert request.headers["User-Agent"].endswith("(Uncached)")
        assert checks[-1].severity == Severity.SUCCESS

    @pytest.mark.asyncio
    async def test_no_url(self, probe_config):
        async with mock_client() as client:
            checks = await check_http_uncached(client, "", probe_config)
        assert checks[0].severity == Severity.WARNING


def slow_client(delay):
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(delay)
        return httpx.Response(200, text="<html></html>")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestOverallTimeout:
    @pytest.mark.asyncio
    async def test_slow_response_cut_off(self):
        async with slow_client(5) as client:
            with pytest.raises(MeasurementFailedError, match="exceeded 0.1s"):
                await fetch_timed(client, URL, timeout=0.1)

    @pytest.mark.asyncio
    async def test_probe_uses_configured_timeout(self, probe_config):
        config = replace(probe_config, http_timeout=0.1)
        async with slow_client(5) as client:
            checks = await check_http_uncached(client, URL, config)
        assert checks == [Check.error("HTTP uncached check error: Request exceeded 0.1s")]


class TestCachedVersusUncachedTiers:
    @pytest.mark.asyncio
    async def test_same_latency_classified_per_variant(self, probe_config):
        # ~350ms sits above the cached warning tier but well inside the uncached one
        async with slow_client(0.35) as client:
            cached = await check_http_cached(client, URL, probe_config)
            uncached = await check_http_uncached(client, URL, probe_config)
        assert cached[-1].severity == Severity.WARNING
        assert uncached[-1].severity == Severity.SUCCESS
