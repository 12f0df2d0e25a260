"""Liveness probing of registered services.

Probing is observational: a failed probe is logged (or raised on request)
but never removes or changes a directory entry.
"""

import logging
from typing import Optional

from fm_service_directory.clients import HealthCheckClient
from fm_service_directory.exceptions import HeartbeatError, MissingHostError
from fm_service_directory.models import Service

logger = logging.getLogger(__name__)


class HealthProber:
    """Probes a service's primary host on its health path.

    Example:
        ```python
        prober = HealthProber(HealthCheckClient(path="/hb", timeout=5.0))
        healthy = await prober.check(service)
        ```
    """

    def __init__(self, client: Optional[HealthCheckClient] = None):
        self.client = client or HealthCheckClient()

    async def check(self, service: Service, raise_on_failure: bool = False) -> bool:
        """Probe ``service.primary_host``.

        Args:
            service: Registered service to probe
            raise_on_failure: Raise HeartbeatError instead of returning False

        Returns:
            True if the host answered with a 2xx status

        Raises:
            MissingHostError: If the service lists no hosts
            HeartbeatError: If the probe failed and raise_on_failure is set
        """
        host = service.primary_host
        if host is None:
            raise MissingHostError(service.name)

        result = await self.client.probe(host)
        if result.ok:
            logger.info(f"{service.name} OK")
            return True

        cause = result.error or f"HTTP {result.status_code}"
        logger.warning(f"Heartbeat failed for {service.name} at {result.url}: {cause}")
        if raise_on_failure:
            raise HeartbeatError(service.name, result.url, cause)
        return False
