"""
OrderMonitor — one check cycle across every configured store region.

    for each region (concurrently):
        fetch awaiting / recent / incomplete (concurrently, wait for all)
        enrich against the cycle's single `now`
        classify → ClassifiedView
        dispatch → StoreCheckResult

A region whose fetch fails (ConfigError, UpstreamError, TransportError)
is reported as a StoreCheckFailure entry; the other regions still run.
Anything else is a bug and propagates to the caller, which answers 500.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from config.settings import Settings, settings as default_settings
from models.domain import (
    CheckCycleResult,
    ClassifiedView,
    Order,
    StoreCheckFailure,
    StoreCheckResult,
    StoreRegion,
)
from models.errors import ConfigError, RegionError
from services.classifier import build_view
from services.dispatcher import AlertDispatcher

logger = logging.getLogger("orderwatch.monitor")


async def gather_region_fetches(client, region: StoreRegion) -> tuple[list[Order], list[Order], list[Order]]:
    """
    Issue the three fetches concurrently and wait for all of them.
    Raises the first failure (in awaiting, recent, incomplete order) once all have settled.
    """
    results = await asyncio.gather(
        client.fetch_awaiting_shipment(region),
        client.fetch_recent(region),
        client.fetch_incomplete(region),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    awaiting, recent, incomplete = results
    return awaiting, recent, incomplete


class OrderMonitor:
    def __init__(
        self,
        client,
        dispatcher: AlertDispatcher,
        config: Settings | None = None,
        regions: Iterable[StoreRegion] = tuple(StoreRegion),
    ) -> None:
        self.client     = client
        self.dispatcher = dispatcher
        self.config     = config or default_settings
        self.regions    = [StoreRegion(r) for r in regions]

    async def run_check(self, now: Optional[datetime] = None) -> CheckCycleResult:
        now = now or datetime.now(timezone.utc)
        logger.info("check cycle starting regions=%s", [r.value for r in self.regions])

        results = await asyncio.gather(*(self._check_region(r, now) for r in self.regions))

        cycle = CheckCycleResult(results=list(results), checked=now)
        logger.info(
            "check cycle complete ok=%d failed=%d",
            len(results) - len(cycle.failures), len(cycle.failures),
        )
        return cycle

    async def evaluate_region(self, region: StoreRegion, now: datetime) -> ClassifiedView:
        creds = self.config.credentials_for(region)
        awaiting, recent, incomplete = await gather_region_fetches(self.client, region)
        return build_view(
            region, awaiting, recent, incomplete,
            now=now,
            store_hash=creds.store_hash,
            threshold_hours=self.config.threshold_hours,
            incomplete_threshold_minutes=self.config.incomplete_threshold_minutes,
        )

    async def _check_region(
        self, region: StoreRegion, now: datetime,
    ) -> StoreCheckResult | StoreCheckFailure:
        try:
            view = await self.evaluate_region(region, now)
        except ConfigError as exc:
            logger.warning("region %s skipped: %s", region.value, exc.detail)
            return StoreCheckFailure(store=region, error="Region not configured", details=str(exc))
        except RegionError as exc:
            logger.error("region %s fetch failed: %s", region.value, exc)
            return StoreCheckFailure(store=region, error="Failed to fetch orders", details=str(exc))

        logger.info(
            "region %s classified overdue=%d incomplete=%d commented=%d",
            region.value, len(view.overdue), len(view.incomplete_stuck), len(view.commented),
        )
        return await self.dispatcher.dispatch(view)
