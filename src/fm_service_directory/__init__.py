"""FaultMaven Service Directory

Process-local registry of services, their hosts and classified endpoints,
mirrored into Redis and checked with liveness probes.
"""

__version__ = "0.1.0"

# Export models first (no dependencies)
from fm_service_directory.models import (
    Endpoint,
    EndpointSet,
    EndpointVisibility,
    MatchMode,
    Service,
)

from fm_service_directory.exceptions import (
    ServiceDirectoryError,
    PreconditionError,
    ServiceNotFoundError,
    MissingHostError,
    CorruptRecordError,
    HeartbeatError,
)

from fm_service_directory.discovery import (
    ServiceRegistry,
    LifecycleEventType,
    HealthProber,
)

from fm_service_directory.config import RegistryConfig
from fm_service_directory.lifecycle import RegistryHandle, init_registry, shutdown_registry

__all__ = [
    # Models
    "Endpoint", "EndpointSet", "EndpointVisibility", "MatchMode", "Service",
    # Errors
    "ServiceDirectoryError", "PreconditionError", "ServiceNotFoundError",
    "MissingHostError", "CorruptRecordError", "HeartbeatError",
    # Registry
    "ServiceRegistry", "LifecycleEventType", "HealthProber",
    # Lifecycle
    "RegistryConfig", "RegistryHandle", "init_registry", "shutdown_registry",
]
