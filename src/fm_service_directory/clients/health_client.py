"""HTTP client issuing liveness probes against service hosts."""

from dataclasses import dataclass
from typing import Optional

import httpx

from fm_service_directory.clients.base import BaseServiceClient


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single liveness probe.

    Attributes:
        url: Probed URL
        ok: True for a 2xx response
        status_code: HTTP status, None if no response was received
        error: Transport error description when the request failed
    """

    url: str
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class HealthCheckClient(BaseServiceClient):
    """Async client for ``GET <scheme>://<host><path>`` liveness checks.

    Usage:
        client = HealthCheckClient(timeout=5.0)
        result = await client.probe("10.0.0.1:8080")
    """

    def __init__(
        self,
        path: str = "/hb",
        timeout: float = 10.0,
        scheme: str = "http",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize client.

        Args:
            path: Health path appended to the host (default: "/hb")
            timeout: Request timeout in seconds (default: 10.0)
            scheme: URL scheme (default: "http")
            transport: Optional httpx transport
        """
        super().__init__(timeout=timeout, scheme=scheme, transport=transport)
        self.path = path if path.startswith("/") else f"/{path}"

    def url_for(self, host: str) -> str:
        return f"{self.scheme}://{host}{self.path}"

    async def probe(self, host: str, correlation_id: Optional[str] = None) -> ProbeResult:
        """Probe ``host`` and report the outcome without raising.

        Args:
            host: "host[:port]" address
            correlation_id: Optional correlation ID for request tracing

        Returns:
            ProbeResult; transport failures are reported with ``ok=False``
        """
        url = self.url_for(host)
        try:
            async with self._get_client() as client:
                response = await client.get(url, headers=self._headers(correlation_id))
        except httpx.HTTPError as e:
            return ProbeResult(url=url, ok=False, error=f"{e.__class__.__name__}: {e}")

        return ProbeResult(url=url, ok=response.is_success, status_code=response.status_code)
