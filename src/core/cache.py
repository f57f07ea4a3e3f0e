"""
Redis caching service for ContractLens.

This module provides the shared Redis connection and a JSON cache on top of it.
The connection runs without response decoding so the same client can carry
binary upload payloads for the staging area.
"""

import json
import logging
from typing import Any, Optional

from redis import asyncio as aioredis

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


async def create_redis_client(settings: Optional[Settings] = None) -> aioredis.Redis:
    """Create the process-wide Redis client and verify the connection."""
    settings = settings or get_settings()
    client = aioredis.from_url(
        settings.REDIS_URL,
        decode_responses=False,
        max_connections=settings.MAX_CONNECTIONS_COUNT,
    )
    await client.ping()
    logger.info(f"Connected to Redis at {settings.REDIS_HOST}:{settings.REDIS_PORT}")
    return client


class RedisCache:
    """JSON cache over a Redis client.

    Cache failures never fail a request: reads degrade to a miss and writes
    are dropped, both logged.
    """

    def __init__(self, client: Optional[aioredis.Redis]):
        self._redis_client = client

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        if not self._redis_client:
            return None

        try:
            value = await self._redis_client.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.error(f"Redis get error for key {key}: {e}")
            return None

    async def set(self, key: str, value: Any, expire: int = 300) -> bool:
        """Set value in cache with expiration."""
        if not self._redis_client:
            return False

        try:
            serialized = json.dumps(value)
            await self._redis_client.set(key, serialized, ex=expire)
            return True
        except Exception as e:
            logger.error(f"Redis set error for key {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete value from cache."""
        if not self._redis_client:
            return False

        try:
            await self._redis_client.delete(key)
            return True
        except Exception as e:
            logger.error(f"Redis delete error for key {key}: {e}")
            return False

    async def ping(self) -> bool:
        """Check that Redis answers."""
        if not self._redis_client:
            return False

        try:
            return bool(await self._redis_client.ping())
        except Exception as e:
            logger.error(f"Redis ping error: {e}")
            return False


def contract_cache_key(contract_id: str) -> str:
    """Build cache key for a stored contract analysis."""
    return f"contract:{contract_id}"


def revoked_token_key(jti: str) -> str:
    """Build cache key marking a revoked access token."""
    return f"revoked:{jti}"
