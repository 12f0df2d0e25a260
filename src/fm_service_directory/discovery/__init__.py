"""Service Discovery Module

In-memory service directory with endpoint classification, lifecycle
notifications and liveness probing.
"""

from .directory import DirectoryResult, ServiceDirectory
from .events import (
    EventDispatcher,
    LifecycleEventType,
    ServiceConnected,
    ServiceDisconnected,
)
from .health import HealthProber
from .service_registry import ServiceRegistry

__all__ = [
    "ServiceRegistry",
    "ServiceDirectory",
    "DirectoryResult",
    "EventDispatcher",
    "LifecycleEventType",
    "ServiceConnected",
    "ServiceDisconnected",
    "HealthProber",
]
