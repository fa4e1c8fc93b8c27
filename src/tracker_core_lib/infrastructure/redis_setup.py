"""Redis Connection Factory with Sentinel Support

Provides the Redis client behind server-side device storage, supporting:
- Standalone Redis (development/self-hosted)
- Redis Sentinel (HA deployments)

Device storage is read synchronously on every ownership check, so the
client is the synchronous `redis.Redis`.
"""

import logging
import os
from typing import List, Optional, Tuple

from redis import Redis
from redis.sentinel import Sentinel

from tracker_core_lib.utils import service_startup_retry

logger = logging.getLogger(__name__)


DEFAULT_SENTINEL_PORT = 26379


def _sentinel_addresses(hosts: str) -> List[Tuple[str, int]]:
    """Split "host[:port],..." into (host, port) pairs; blank entries are skipped."""
    addresses = []
    for entry in filter(None, (part.strip() for part in hosts.split(","))):
        host, _, port = entry.rpartition(":") if ":" in entry else (entry, "", "")
        addresses.append((host, int(port) if port else DEFAULT_SENTINEL_PORT))
    return addresses


@service_startup_retry
def _verify_redis_connection(client: Redis) -> None:
    """Ping Redis, retrying with backoff while it comes up."""
    client.ping()
    logger.info("Redis connection verified")


def get_redis_client(
    mode: Optional[str] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
    db: Optional[int] = None,
    password: Optional[str] = None,
    sentinel_hosts: Optional[str] = None,
    master_set: Optional[str] = None,
    verify: bool = True,
) -> Redis:
    """Get a Redis client for device storage.

    Environment Variables:
        REDIS_MODE: "standalone" (default) or "sentinel"
        REDIS_HOST / REDIS_PORT / REDIS_DB / REDIS_PASSWORD: standalone settings
        REDIS_SENTINEL_HOSTS: Comma-separated "host:port" pairs (sentinel mode)
        REDIS_MASTER_SET: Master set name (default: "mymaster")

    Args:
        verify: Ping the server (with startup retry) before returning

    Raises:
        ValueError: If Sentinel mode is configured but no sentinel hosts are given
        redis.exceptions.ConnectionError: If Redis is unreachable after retries
    """
    mode = (mode or os.getenv("REDIS_MODE", "standalone")).lower()
    db_index = db if db is not None else int(os.getenv("REDIS_DB", "0"))
    password = password or os.getenv("REDIS_PASSWORD")

    logger.info(f"Initializing Redis client in {mode} mode")

    if mode == "sentinel":
        sentinel_hosts_str = sentinel_hosts or os.getenv("REDIS_SENTINEL_HOSTS", "")
        master_name = master_set or os.getenv("REDIS_MASTER_SET", "mymaster")

        sentinels = _sentinel_addresses(sentinel_hosts_str)
        if not sentinels:
            raise ValueError(
                "REDIS_SENTINEL_HOSTS environment variable is required for Sentinel mode"
            )

        logger.info(f"Connecting to Redis Sentinel: master={master_name}, sentinels={sentinels}")

        sentinel_client = Sentinel(
            sentinels,
            sentinel_kwargs={"password": password} if password else {},
        )
        redis_client = sentinel_client.master_for(
            master_name,
            db=db_index,
            password=password,
            decode_responses=True,
        )

    else:
        redis_host = host or os.getenv("REDIS_HOST", "localhost")
        redis_port = port if port is not None else int(os.getenv("REDIS_PORT", "6379"))

        logger.info(f"Connecting to standalone Redis: {redis_host}:{redis_port}/{db_index}")

        redis_client = Redis(
            host=redis_host,
            port=redis_port,
            db=db_index,
            password=password,
            decode_responses=True,
            socket_connect_timeout=5,
        )

    if verify:
        _verify_redis_connection(redis_client)

    return redis_client
