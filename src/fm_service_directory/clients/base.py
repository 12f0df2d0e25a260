"""Base HTTP client for calls from the directory to registered services."""

import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class BaseServiceClient:
    """Base class for outbound HTTP clients.

    Each call opens a short-lived ``httpx.AsyncClient`` so clients hold no
    connection state between probes.

    Usage:
        class StatusClient(BaseServiceClient):
            async def status(self, host: str) -> int:
                async with self._get_client() as client:
                    response = await client.get(
                        f"{self.scheme}://{host}/status",
                        headers=self._headers(),
                    )
                    return response.status_code
    """

    def __init__(
        self,
        timeout: float = 10.0,
        scheme: str = "http",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize client.

        Args:
            timeout: Request timeout in seconds (default: 10.0)
            scheme: URL scheme used to reach services (default: "http")
            transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.timeout = timeout
        self.scheme = scheme
        self._transport = transport

        logger.debug(f"Initialized {self.__class__.__name__} with timeout={timeout}s")

    def _headers(self, correlation_id: Optional[str] = None) -> dict:
        """Generate request headers.

        Args:
            correlation_id: Optional correlation ID for request tracing

        Returns:
            Headers dict
        """
        headers = {
            "Accept": "application/json",
            "User-Agent": "fm-service-directory",
        }

        if correlation_id:
            headers["X-Correlation-ID"] = correlation_id

        return headers

    def _get_client(self) -> httpx.AsyncClient:
        """Get HTTP client instance with configured timeout.

        Returns:
            Configured AsyncClient ready for use with async context manager
        """
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
