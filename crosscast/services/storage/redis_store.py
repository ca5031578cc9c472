"""
Redis-backed key-value store.

Values are stored as JSON under ``<prefix>:<key>``. Connection failures are
reported as PersistenceUnavailable so SessionStore can fall back to
session-only state.
"""

from typing import Any

import orjson
from loguru import logger
from redis.asyncio import Redis
from redis.exceptions import RedisError

from crosscast.app_config import get_app_environ_config
from crosscast.utils.app_errors import PersistenceUnavailable


def hide_password(connection_string: str) -> str:
    """
    Hide password in Redis connection string for logging.

    Args:
        connection_string: Original connection string

    Returns:
        Connection string with password replaced by ***
    """
    if "@" not in connection_string or "://" not in connection_string:
        return connection_string
    protocol_part, rest = connection_string.split("://", 1)
    # The password itself may contain @, the host part starts after the last one
    auth_part, _, host_part = rest.rpartition("@")
    if ":" not in auth_part:
        return connection_string
    username, password = auth_part.split(":", 1)
    if not password:
        return connection_string
    return f"{protocol_part}://{username}:***@{host_part}"


class RedisStore:
    """``Store`` on top of redis.asyncio."""

    def __init__(self, client: Redis, prefix: str | None = None):
        self.client = client
        self.prefix = prefix if prefix is not None else get_app_environ_config().REDIS_KEY_PREFIX

    @classmethod
    def from_url(cls, url: str | None = None, prefix: str | None = None) -> "RedisStore":
        url = url or get_app_environ_config().REDIS_URL
        logger.info("Open Redis store: {}", hide_password(url))
        return cls(Redis.from_url(url), prefix=prefix)

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}" if self.prefix else key

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self.client.get(self._key(key))
        except (RedisError, OSError) as e:
            raise PersistenceUnavailable(f"Redis get failed: {e}") from e
        if raw is None:
            return None
        try:
            return orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.warning("Ignoring non-JSON value under {}", self._key(key))
            return None

    async def set(self, key: str, value: Any | None) -> None:
        try:
            if value is None:
                await self.client.delete(self._key(key))
            else:
                await self.client.set(self._key(key), orjson.dumps(value))
        except (RedisError, OSError) as e:
            raise PersistenceUnavailable(f"Redis set failed: {e}") from e

    async def aclose(self) -> None:
        try:
            await self.client.aclose()
            logger.info("Closed Redis store")
        except Exception as e:
            logger.error("Error closing Redis store: {}", e)
