"""Shared fixtures for service directory tests."""

from typing import Dict, List, Optional, Set

import httpx
import pytest
from fakeredis import FakeAsyncRedis
from redis.exceptions import ConnectionError as RedisConnectionError

from fm_service_directory.clients import HealthCheckClient
from fm_service_directory.discovery import HealthProber, ServiceRegistry
from fm_service_directory.infrastructure import RedisKeyValueStore
from fm_service_directory.models import Endpoint, EndpointSet


class ProbeRecorder:
    """httpx handler that records probed URLs and answers per host."""

    def __init__(self, default_status: int = 200):
        self.default_status = default_status
        self.statuses: Dict[str, int] = {}
        self.unreachable: Set[str] = set()
        self.urls: List[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.urls.append(str(request.url))
        host = request.url.netloc.decode()
        if host in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(self.statuses.get(host, self.default_status))


class FailingStore:
    """KeyValueStore whose writes and deletes always fail."""

    def __init__(self):
        self.data: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        raise RedisConnectionError("store unreachable")

    async def delete(self, key: str) -> None:
        raise RedisConnectionError("store unreachable")

    async def scan(self, pattern: str) -> Set[str]:
        return set()


@pytest.fixture
def probes():
    return ProbeRecorder()


@pytest.fixture
def prober(probes):
    return HealthProber(HealthCheckClient(transport=httpx.MockTransport(probes)))


@pytest.fixture
def registry(prober):
    return ServiceRegistry(prober=prober)


@pytest.fixture
async def redis_client():
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def store(redis_client):
    return RedisKeyValueStore(redis_client)


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def orders_endpoints():
    return EndpointSet(
        public=(Endpoint(pattern="/orders"),),
        protected=(),
        internal=(Endpoint(pattern="/orders/admin"),),
    )
