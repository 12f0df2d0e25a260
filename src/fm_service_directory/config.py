"""Registry configuration.

Values come from explicit arguments first, then environment variables,
then defaults. Invalid environment values are logged and ignored.

Environment Variables:
    REGISTRY_KEY_PREFIX: Store key prefix (default: "registry")
    REGISTRY_HEARTBEAT_PATH: Health path probed on each host (default: "/hb")
    REGISTRY_HEARTBEAT_SCHEME: URL scheme for probes (default: "http")
    REGISTRY_HEARTBEAT_TIMEOUT: Probe timeout in seconds (default: 10.0)
    REGISTRY_STRICT_STARTUP_HEARTBEAT: Abort startup when a rehydrated
        service fails its probe (default: "true")
    REDIS_URL: Optional Redis URL, takes precedence over REDIS_MODE/REDIS_HOST
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid value in {name}: {raw!r}, using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning(f"Invalid value in {name}: {raw!r}, using {default}")
    return default


@dataclass
class RegistryConfig:
    """Settings for a registry instance.

    Attributes:
        key_prefix: Prefix of persisted keys (``<prefix>_<name>_hosts``)
        heartbeat_path: Health path appended to the primary host
        heartbeat_scheme: URL scheme used for probes
        heartbeat_timeout: Probe timeout in seconds
        strict_startup_heartbeat: Raise when a rehydrated service fails its probe
        redis_url: Redis URL; when None the REDIS_* variables are used
    """

    key_prefix: str = "registry"
    heartbeat_path: str = "/hb"
    heartbeat_scheme: str = "http"
    heartbeat_timeout: float = 10.0
    strict_startup_heartbeat: bool = True
    redis_url: Optional[str] = field(default=None, repr=False)

    @classmethod
    def from_env(cls) -> "RegistryConfig":
        """Build a config from REGISTRY_* / REDIS_URL environment variables."""
        defaults = cls()
        config = cls(
            key_prefix=os.getenv("REGISTRY_KEY_PREFIX", defaults.key_prefix),
            heartbeat_path=os.getenv("REGISTRY_HEARTBEAT_PATH", defaults.heartbeat_path),
            heartbeat_scheme=os.getenv("REGISTRY_HEARTBEAT_SCHEME", defaults.heartbeat_scheme),
            heartbeat_timeout=_env_float("REGISTRY_HEARTBEAT_TIMEOUT", defaults.heartbeat_timeout),
            strict_startup_heartbeat=_env_bool(
                "REGISTRY_STRICT_STARTUP_HEARTBEAT", defaults.strict_startup_heartbeat
            ),
            redis_url=os.getenv("REDIS_URL") or None,
        )
        logger.debug(f"Loaded {config}")
        return config
