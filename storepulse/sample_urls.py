"""
Random storefront URL picker for the HTTP probes.

Picks one publicly visible product or category in a store uniformly at
random from a bounded candidate list. Failures are logged and reported as
None; a missing sample URL must never break the report.
"""

from __future__ import annotations

import logging
import random

from .collaborators.catalog import CatalogListing, EntityKind
from .constants import PRODUCT_WEIGHT_PERCENT

logger = logging.getLogger(__name__)


class SampleUrlPicker:
    def __init__(
        self,
        catalog: CatalogListing,
        page_size: int = 100,
        rng: random.Random | None = None,
    ) -> None:
        self._catalog = catalog
        self._page_size = page_size
        self._rng = rng or random.Random()

    async def pick_random_url(self, kind: EntityKind, store_id: int) -> str | None:
        try:
            ids = await self._catalog.list_ids(kind, store_id, self._page_size)
            if not ids:
                return None
            entity_id = self._rng.choice(ids)
            return await self._catalog.resolve_url(kind, entity_id, store_id)
        except Exception as e:
            logger.error("Error getting random %s URL: %s", kind.value, e)
            return None

    async def pick_random_frontend_url(self, store_id: int) -> str | None:
        """70% product / 30% category, falling back to the other kind."""
        if self._rng.randint(1, 100) <= PRODUCT_WEIGHT_PERCENT:
            order = (EntityKind.PRODUCT, EntityKind.CATEGORY)
        else:
            order = (EntityKind.CATEGORY, EntityKind.PRODUCT)
        for kind in order:
            url = await self.pick_random_url(kind, store_id)
            if url:
                return url
        return None
