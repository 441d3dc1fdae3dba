"""
Token Blacklist using Redis

Revocation store for access tokens. A token present here must be treated as
invalid even if its signature and expiry are fine (e.g. after logout).

Entries expire on their own through the Redis TTL, so the store never needs
cleanup. Keys are the SHA-256 of the raw token to keep bearer credentials
out of Redis.
"""

import asyncio
import hashlib
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from app.core.config import settings

logger = logging.getLogger(__name__)


class TokenBlacklist:
    """
    Redis-backed revocation store.

    Unlike a cache, lookups here must not silently degrade: a connection
    failure propagates so the session gate can deny the request.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        prefix: Optional[str] = None,
        default_ttl_seconds: Optional[int] = None,
    ):
        self._url = url or settings.REDIS_URL
        self._prefix = prefix or settings.TOKEN_BLACKLIST_PREFIX
        self._default_ttl = default_ttl_seconds or settings.TOKEN_BLACKLIST_TTL_SECONDS
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[redis.Redis] = None
        self._lock: asyncio.Lock = asyncio.Lock()

    async def get_client(self) -> redis.Redis:
        """Get or create the Redis client.

        Uses a lock so concurrent first callers share a single pool.
        """
        if self._client is not None:
            return self._client

        async with self._lock:
            if self._client is not None:
                return self._client

            self._pool = ConnectionPool.from_url(
                self._url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=20,
            )
            self._client = redis.Redis(connection_pool=self._pool)
            logger.info("Redis token blacklist client created")
        return self._client

    async def close(self) -> None:
        """Close Redis connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None
        if self._pool:
            await self._pool.disconnect()
            self._pool = None

    def _make_key(self, token: str) -> str:
        digest = hashlib.sha256(token.encode("utf-8")).hexdigest()
        return f"{self._prefix}{digest}"

    async def get(self, token: str) -> Optional[str]:
        """Return the stored revocation reason, or None if the token is not revoked."""
        client = await self.get_client()
        return await client.get(self._make_key(token))

    async def set(
        self, token: str, value: str = "logout", ttl_seconds: Optional[int] = None
    ) -> None:
        """Revoke a token for ttl_seconds (defaults to TOKEN_BLACKLIST_TTL_SECONDS)."""
        client = await self.get_client()
        await client.setex(self._make_key(token), ttl_seconds or self._default_ttl, value)

    async def is_blacklisted(self, token: str) -> bool:
        return await self.get(token) is not None

    async def health_check(self) -> Dict[str, Any]:
        try:
            client = await self.get_client()
            await client.ping()
            return {"status": "healthy", "available": True}
        except Exception as e:
            return {"status": "unhealthy", "available": False, "error": str(e)}


token_blacklist = TokenBlacklist()
