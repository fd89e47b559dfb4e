# services/redis_connection.py
from functools import lru_cache

import redis
from django.conf import settings


# Redis Connection ------------------------------------------
@lru_cache(maxsize=1)
def get_redis_connection() -> redis.Redis:
    """Shared client for the pending reaction queues (connection pool is reused)."""
    url = getattr(settings, "REDIS_URL", "redis://redis:6379/0")
    return redis.from_url(url, decode_responses=True)
