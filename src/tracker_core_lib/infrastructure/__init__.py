"""Infrastructure connections (Redis) for server-side deployments."""

from tracker_core_lib.infrastructure.redis_setup import get_redis_client

__all__ = ["get_redis_client"]
