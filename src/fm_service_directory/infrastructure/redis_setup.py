"""Redis Connection Factory for the Registry Store

Builds the async Redis client backing the durable registry records:
- URL (REDIS_URL, e.g. redis://:secret@redis:6379/0)
- Standalone Redis (development/self-hosted)
- Redis Sentinel (HA deployments)

Every client is verified with PING before it is handed out; a client that
fails verification is closed before the error propagates.
"""

import logging
import os
from typing import List, Optional, Tuple

from redis.asyncio import Redis
from redis.asyncio.sentinel import Sentinel

from fm_service_directory.utils import service_startup_retry

logger = logging.getLogger(__name__)

DEFAULT_SENTINEL_PORT = 26379


def parse_sentinel_hosts(hosts_str: str) -> List[Tuple[str, int]]:
    """Parse a comma-separated ``host[:port]`` list.

    Example:
        >>> parse_sentinel_hosts("sentinel1:26380, sentinel2")
        [('sentinel1', 26380), ('sentinel2', 26379)]
    """
    sentinels = []
    for entry in hosts_str.split(","):
        entry = entry.strip()
        if not entry:
            continue
        host, _, port_str = entry.partition(":")
        sentinels.append((host, int(port_str) if port_str else DEFAULT_SENTINEL_PORT))
    return sentinels


@service_startup_retry
async def verify_redis_connection(client: Redis) -> None:
    """PING the store, retrying with the startup policy.

    Raises:
        redis.exceptions.RedisError: If every attempt fails
    """
    await client.ping()
    logger.info("Redis connection verified")


async def _verified(client: Redis) -> Redis:
    """Return ``client`` once PING succeeds; close it if verification fails."""
    try:
        await verify_redis_connection(client)
    except Exception:
        await client.aclose()
        raise
    return client


def _sentinel_client(
    sentinel_hosts: str,
    master_set: str,
    db: int,
    password: Optional[str],
    decode_responses: bool,
) -> Redis:
    if not sentinel_hosts:
        raise ValueError("REDIS_SENTINEL_HOSTS environment variable is required for Sentinel mode")

    sentinels = parse_sentinel_hosts(sentinel_hosts)
    if not sentinels:
        raise ValueError(f"No valid sentinel hosts found in: {sentinel_hosts}")

    logger.info(f"Connecting to Redis Sentinel: master={master_set}, sentinels={sentinels}")
    sentinel = Sentinel(
        sentinels,
        sentinel_kwargs={"password": password} if password else {},
        socket_keepalive=True,
    )
    return sentinel.master_for(
        master_set,
        db=db,
        password=password,
        decode_responses=decode_responses,
        socket_keepalive=True,
    )


async def get_redis_client(
    url: Optional[str] = None,
    mode: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
    password: Optional[str] = None,
    sentinel_hosts: Optional[str] = None,
    master_set: Optional[str] = None,
    decode_responses: bool = True,
) -> Redis:
    """Create and verify the registry's Redis client.

    Explicit arguments win over environment variables. A URL (argument or
    REDIS_URL) takes precedence over mode/host settings.

    Args:
        url: Redis URL
        mode: "standalone" (default) or "sentinel" (REDIS_MODE)
        host: Standalone host (REDIS_HOST, default "localhost")
        port: Standalone port (REDIS_PORT, default 6379)
        db: Database index (REDIS_DB, default 0)
        password: Password (REDIS_PASSWORD)
        sentinel_hosts: "host:port" list for Sentinel (REDIS_SENTINEL_HOSTS)
        master_set: Sentinel master name (REDIS_MASTER_SET, default "mymaster")
        decode_responses: Return str instead of bytes (default True; the
            registry store expects str values)

    Returns:
        Connected async Redis client

    Raises:
        ValueError: If Sentinel mode is selected without sentinel hosts
        redis.exceptions.RedisError: If the connection cannot be verified
    """
    url = url or os.getenv("REDIS_URL")
    if url:
        logger.info("Connecting to Redis from URL")
        client = Redis.from_url(url, decode_responses=decode_responses, socket_connect_timeout=5)
        return await _verified(client)

    mode = (mode or os.getenv("REDIS_MODE", "standalone")).lower()
    db_index = db if db is not None else int(os.getenv("REDIS_DB", "0"))
    password = password or os.getenv("REDIS_PASSWORD")

    if mode == "sentinel":
        master_name = master_set or os.getenv("REDIS_MASTER_SET", "mymaster")
        client = _sentinel_client(
            sentinel_hosts or os.getenv("REDIS_SENTINEL_HOSTS", ""),
            master_name,
            db_index,
            password,
            decode_responses,
        )
        await _verified(client)
        logger.info(f"Redis Sentinel connection established: master={master_name}, db={db_index}")
        return client

    redis_host = host or os.getenv("REDIS_HOST", "localhost")
    redis_port = port if port is not None else int(os.getenv("REDIS_PORT", "6379"))
    logger.info(f"Connecting to standalone Redis: {redis_host}:{redis_port}/{db_index}")
    client = Redis(
        host=redis_host,
        port=redis_port,
        db=db_index,
        password=password,
        decode_responses=decode_responses,
        socket_keepalive=True,
        socket_connect_timeout=5,
    )
    await _verified(client)
    logger.info(f"Standalone Redis connection established: {redis_host}:{redis_port}/{db_index}")
    return client
