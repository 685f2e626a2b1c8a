"""
Relational database access for the probes.

Probes depend on the small SqlConnection protocol; SqlAlchemyConnection is
the production adapter over an async SQLAlchemy engine (mysql+aiomysql for
the platform database, sqlite+aiosqlite in tests).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from ..exceptions import CollaboratorUnavailableError

logger = logging.getLogger(__name__)


class SqlConnection(Protocol):
    async def fetch_all(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]: ...

    async def close(self) -> None: ...


class SqlAlchemyConnection:
    """Read-only query helper over an AsyncEngine."""

    def __init__(self, url: str, engine: AsyncEngine | None = None) -> None:
        if engine is None and not url:
            raise CollaboratorUnavailableError("DATABASE_URL is not configured")
        self._engine = engine or create_async_engine(url, pool_pre_ping=True)

    async def fetch_all(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        async with self._engine.connect() as conn:
            result = await conn.execute(text(sql), dict(params or {}))
            return [dict(row._mapping) for row in result]

    async def close(self) -> None:
        await self._engine.dispose()
