"""Key/value cache-server client used by the cache-server probe."""

from __future__ import annotations

from typing import Any, Protocol

import redis.asyncio as redis

from ..exceptions import CollaboratorUnavailableError


class KeyValueStoreClient(Protocol):
    async def ping(self) -> Any: ...

    async def info(self) -> dict[str, Any]: ...

    async def close(self) -> None: ...


class RedisStoreClient:
    """KeyValueStoreClient backed by redis.asyncio."""

    def __init__(self, url: str, connect_timeout: float = 1.0) -> None:
        if not url:
            raise CollaboratorUnavailableError("REDIS_URL is not configured")
        self.redis_client = redis.from_url(
            url,
            socket_connect_timeout=connect_timeout,
            socket_timeout=connect_timeout * 5,
        )

    async def ping(self) -> Any:
        return await self.redis_client.ping()

    async def info(self) -> dict[str, Any]:
        return await self.redis_client.info()

    async def close(self) -> None:
        await self.redis_client.aclose()
