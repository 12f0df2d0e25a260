"""Utility Functions"""

from fm_service_directory.utils.resilience import service_startup_retry

__all__ = [
    "service_startup_retry",
]
