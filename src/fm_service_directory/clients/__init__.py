"""HTTP clients used by the service directory."""

from fm_service_directory.clients.base import BaseServiceClient
from fm_service_directory.clients.health_client import HealthCheckClient, ProbeResult

__all__ = [
    "BaseServiceClient",
    "HealthCheckClient",
    "ProbeResult",
]
