"""Ephemeral object stage for uploaded contracts.

Each upload lives in Redis under its own key for the duration of one request
sequence. Entries are removed explicitly once processing ends; the TTL only
bounds storage if a request dies before it can clean up.
"""

import logging
import secrets
import time
from typing import Optional

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from core.exceptions import StageUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_STAGE_TTL_SECONDS = 3600


class ObjectStage:
    """Binary-safe key/value staging area with expiry.

    Unlike the JSON cache, every Redis failure here is raised as
    ``StageUnavailableError``: a request that cannot stage or read its upload
    cannot continue.
    """

    KEY_PREFIX = "file"

    def __init__(self, client: aioredis.Redis, default_ttl: int = DEFAULT_STAGE_TTL_SECONDS):
        self._client = client
        self.default_ttl = default_ttl

    def new_key(self, user_id: str) -> str:
        """Build a fresh key for one upload by ``user_id``.

        The random nonce keeps two uploads by the same user within the same
        millisecond apart.
        """
        return f"{self.KEY_PREFIX}:{user_id}:{int(time.time() * 1000)}:{secrets.token_hex(8)}"

    async def put(self, key: str, payload: bytes, ttl: Optional[int] = None) -> None:
        """Store ``payload`` under ``key`` with an expiry, overwriting silently."""
        ttl = ttl or self.default_ttl
        try:
            await self._client.set(key, payload, ex=ttl)
        except RedisError as e:
            logger.error(f"Failed to stage {key}: {e}")
            raise StageUnavailableError() from e
        logger.debug(f"Staged {len(payload)} bytes at {key} (ttl={ttl}s)")

    async def get(self, key: str) -> Optional[bytes]:
        """Return the staged payload, or None when it is absent or expired."""
        try:
            value = await self._client.get(key)
        except RedisError as e:
            logger.error(f"Failed to read staged file {key}: {e}")
            raise StageUnavailableError() from e
        if value is None:
            return None
        if isinstance(value, str):
            # Client configured with decode_responses; payloads must stay bytes
            raise StageUnavailableError("File staging store returned decoded text")
        return value

    async def delete(self, key: str) -> None:
        """Remove ``key``; removing an absent key is a no-op."""
        try:
            removed = await self._client.delete(key)
        except RedisError as e:
            logger.error(f"Failed to delete staged file {key}: {e}")
            raise StageUnavailableError() from e
        logger.debug(f"Deleted staged file {key} (existed={bool(removed)})")
