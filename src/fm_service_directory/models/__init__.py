"""
Data models for the service directory.

Pydantic models for services and their classified endpoints. The same models
validate records decoded from the durable store.
"""

from fm_service_directory.models.endpoint import (
    Endpoint,
    EndpointSet,
    EndpointVisibility,
    MatchMode,
    normalize_route,
)
from fm_service_directory.models.service import Service

__all__ = [
    # Endpoints
    "Endpoint", "EndpointSet", "EndpointVisibility", "MatchMode", "normalize_route",
    # Services
    "Service",
]
