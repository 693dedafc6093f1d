"""
OrderQueryService — on-demand classified view for a single store.

Same fetch → enrich → classify path as the check cycle, but:
  - one region only
  - never notifies
  - awaiting-shipment is the primary fetch: its failure fails the call
  - recent / incomplete are optional: a failure degrades that section to []
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from config.settings import Settings, settings as default_settings
from models.domain import ClassifiedView, Order, StoreRegion
from services.classifier import build_view

logger = logging.getLogger("orderwatch.query")


class OrderQueryService:
    def __init__(self, client, config: Settings | None = None) -> None:
        self.client = client
        self.config = config or default_settings

    async def query(self, region: StoreRegion, now: Optional[datetime] = None) -> ClassifiedView:
        region = StoreRegion(region)
        creds = self.config.credentials_for(region)

        awaiting, recent, incomplete = await asyncio.gather(
            self.client.fetch_awaiting_shipment(region),
            self.client.fetch_recent(region),
            self.client.fetch_incomplete(region),
            return_exceptions=True,
        )
        if isinstance(awaiting, BaseException):
            raise awaiting

        now = now or datetime.now(timezone.utc)
        return build_view(
            region,
            awaiting,
            self._optional(region, "recent", recent),
            self._optional(region, "incomplete", incomplete),
            now=now,
            store_hash=creds.store_hash,
            threshold_hours=self.config.threshold_hours,
            incomplete_threshold_minutes=self.config.incomplete_threshold_minutes,
        )

    @staticmethod
    def _optional(region: StoreRegion, section: str, result) -> list[Order]:
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
        if isinstance(result, Exception):
            logger.warning(
                "query %s: %s orders unavailable, returning empty section: %s",
                region.value, section, result,
            )
            return []
        return result
