"""Tests for the health check client and prober."""

import logging

import httpx
import pytest

from fm_service_directory.clients import HealthCheckClient
from fm_service_directory.discovery import HealthProber
from fm_service_directory.exceptions import HeartbeatError, MissingHostError
from fm_service_directory.models import Service


def client_for(handler, **kwargs) -> HealthCheckClient:
    return HealthCheckClient(transport=httpx.MockTransport(handler), **kwargs)


class TestHealthCheckClient:

    async def test_success(self, probes):
        result = await client_for(probes).probe("10.0.0.1:8080")

        assert result.ok
        assert result.status_code == 200
        assert result.url == "http://10.0.0.1:8080/hb"

    async def test_non_2xx_is_failure(self, probes):
        probes.statuses["10.0.0.1:8080"] = 404
        result = await client_for(probes).probe("10.0.0.1:8080")

        assert not result.ok
        assert result.status_code == 404
        assert result.error is None

    async def test_transport_error_is_reported(self, probes):
        probes.unreachable.add("10.0.0.1:8080")
        result = await client_for(probes).probe("10.0.0.1:8080")

        assert not result.ok
        assert result.status_code is None
        assert "ConnectError" in result.error

    async def test_custom_path_and_scheme(self, probes):
        client = client_for(probes, path="health", scheme="https")
        await client.probe("svc:8443")

        assert probes.urls == ["https://svc:8443/health"]

    async def test_correlation_header(self):
        seen = {}

        def handler(request):
            seen["correlation_id"] = request.headers.get("X-Correlation-ID")
            return httpx.Response(200)

        await client_for(handler).probe("h:1", correlation_id="corr-1")
        assert seen["correlation_id"] == "corr-1"


class TestHealthProber:

    async def test_success_logs_ok(self, prober, caplog):
        with caplog.at_level(logging.INFO):
            assert await prober.check(Service(name="orders", hosts=("h:1",))) is True
        assert "orders OK" in caplog.text

    async def test_failure_logs_warning(self, prober, probes, caplog):
        probes.statuses["h:1"] = 503
        with caplog.at_level(logging.WARNING):
            assert await prober.check(Service(name="orders", hosts=("h:1",))) is False
        assert "HTTP 503" in caplog.text

    async def test_failure_raises_when_requested(self, prober, probes):
        probes.statuses["h:1"] = 503
        with pytest.raises(HeartbeatError) as exc_info:
            await prober.check(Service(name="orders", hosts=("h:1",)), raise_on_failure=True)
        assert exc_info.value.service_name == "orders"

    async def test_missing_host(self, prober):
        with pytest.raises(MissingHostError):
            await prober.check(Service(name="orders"))
