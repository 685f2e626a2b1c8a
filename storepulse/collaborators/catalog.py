"""
Catalog listing used to manufacture sample storefront URLs.

The url_rewrite table is the source of truth: an entity is treated as
publicly visible in a store when it has a canonical (non-redirect,
category-less) rewrite there.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Protocol

from .sql import SqlConnection

logger = logging.getLogger(__name__)


class EntityKind(Enum):
    PRODUCT = "product"
    CATEGORY = "category"


class CatalogListing(Protocol):
    async def list_ids(self, kind: EntityKind, store_id: int, limit: int) -> list[int]: ...

    async def resolve_url(self, kind: EntityKind, entity_id: int, store_id: int) -> str | None: ...


_LIST_IDS_SQL = """
SELECT DISTINCT entity_id FROM url_rewrite
WHERE entity_type = :kind AND store_id = :store_id AND redirect_type = 0
  AND (metadata IS NULL OR metadata = '')
ORDER BY entity_id
LIMIT :limit
"""

_REQUEST_PATH_SQL = """
SELECT request_path FROM url_rewrite
WHERE entity_type = :kind AND entity_id = :entity_id AND store_id = :store_id
  AND redirect_type = 0 AND (metadata IS NULL OR metadata = '')
LIMIT 1
"""

_BASE_URL_SQL = """
SELECT scope, value FROM core_config_data
WHERE path = 'web/secure/base_url'
  AND ((scope = 'stores' AND scope_id = :store_id) OR (scope = 'default' AND scope_id = 0))
"""


class UrlRewriteCatalog:
    """CatalogListing over the platform's url_rewrite and core_config_data tables."""

    def __init__(self, sql: SqlConnection, base_url: str = "") -> None:
        self._sql = sql
        self._base_url = base_url

    async def list_ids(self, kind: EntityKind, store_id: int, limit: int) -> list[int]:
        rows = await self._sql.fetch_all(
            _LIST_IDS_SQL, {"kind": kind.value, "store_id": store_id, "limit": limit}
        )
        return [int(row["entity_id"]) for row in rows]

    async def base_url(self, store_id: int) -> str | None:
        if self._base_url:
            return self._base_url
        rows = await self._sql.fetch_all(_BASE_URL_SQL, {"store_id": store_id})
        by_scope = {row["scope"]: row["value"] for row in rows}
        return by_scope.get("stores") or by_scope.get("default")

    async def resolve_url(self, kind: EntityKind, entity_id: int, store_id: int) -> str | None:
        rows = await self._sql.fetch_all(
            _REQUEST_PATH_SQL,
            {"kind": kind.value, "entity_id": entity_id, "store_id": store_id},
        )
        if not rows:
            return None
        base = await self.base_url(store_id)
        if not base:
            return None
        return f"{base.rstrip('/')}/{rows[0]['request_path'].lstrip('/')}"
