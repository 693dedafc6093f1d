"""
BigCommerce v2 Orders client — one adapter for every configured store region.

Endpoint: GET {api_base_url}/{store_hash}/v2/orders
Auth:     X-Auth-Token: {access_token}

Response handling:
  204 No Content / blank body  → []            (BigCommerce's "no orders")
  2xx with a JSON array        → list[Order]   (validated by Order.from_payload)
  any other status             → UpstreamError(region, status)
  connect / read failure       → TransportError(region)
  missing credentials          → ConfigError(region), before any request

No retries here; the scheduler owns retry policy.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import httpx

from config.settings import Settings, settings as default_settings
from models.domain import Order, OrderStatus, StoreRegion
from models.errors import TransportError, UpstreamError

logger = logging.getLogger("orderwatch.data.bigcommerce")


# ── Filter ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class OrderFilter:
    """Selects orders by lifecycle status, by recency, or by creation time."""
    status_id: Optional[int] = None
    limit: int = 250
    newest_first: bool = False
    min_date_created: Optional[datetime] = None

    @classmethod
    def by_status(cls, status: OrderStatus | int, limit: int = 250) -> "OrderFilter":
        return cls(status_id=int(status), limit=limit)

    @classmethod
    def most_recent(cls, limit: int = 20) -> "OrderFilter":
        return cls(limit=limit, newest_first=True)

    @classmethod
    def created_since(cls, since: datetime, limit: int = 50) -> "OrderFilter":
        return cls(limit=limit, newest_first=True, min_date_created=since)

    def to_params(self) -> dict[str, str | int]:
        params: dict[str, str | int] = {"limit": self.limit}
        if self.status_id is not None:
            params["status_id"] = self.status_id
        if self.newest_first:
            params["sort"] = "date_created:desc"
        if self.min_date_created is not None:
            params["min_date_created"] = self.min_date_created.isoformat()
        return params


# ── Client ────────────────────────────────────────────────────────────────────

class BigCommerceClient:
    """
    Async store client. One instance serves every region; credentials are
    resolved per call so a missing region only fails its own requests.

    `transport` is passed straight to httpx.AsyncClient (tests inject
    httpx.MockTransport).
    """

    def __init__(
        self,
        config: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config    = config or default_settings
        self._transport = transport

    async def fetch_orders(self, region: StoreRegion, order_filter: OrderFilter) -> list[Order]:
        region = StoreRegion(region)
        creds  = self._config.credentials_for(region)
        url    = f"{self._config.api_base_url.rstrip('/')}/{creds.store_hash}/v2/orders"
        headers = {
            "X-Auth-Token": creds.access_token,
            "Content-Type": "application/json",
            "Accept":       "application/json",
        }
        params = order_filter.to_params()

        try:
            async with httpx.AsyncClient(
                timeout=self._config.http_timeout_sec, transport=self._transport,
            ) as client:
                response = await client.get(url, params=params, headers=headers)
        except httpx.RequestError as exc:
            logger.error("bigcommerce transport failure region=%s: %s", region.value, exc)
            raise TransportError(region, f"{type(exc).__name__}: {exc}") from exc

        logger.debug(
            "bigcommerce GET region=%s params=%s status=%s",
            region.value, params, response.status_code,
        )

        if response.status_code == 204:
            return []
        if not response.is_success:
            raise UpstreamError(region, response.status_code, response.reason_phrase)

        text = response.text
        if not text or not text.strip():
            return []

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise UpstreamError(region, response.status_code, "response was not valid JSON") from exc
        if not isinstance(payload, list):
            raise UpstreamError(
                region, response.status_code,
                f"expected a list of orders, got {type(payload).__name__}",
            )

        # Single page only; a full page means older orders were not returned.
        if len(payload) >= order_filter.limit:
            logger.warning(
                "bigcommerce page full region=%s limit=%d params=%s; orders beyond it are not evaluated",
                region.value, order_filter.limit, params,
            )

        try:
            return [Order.from_payload(item) for item in payload]
        except ValueError as exc:
            raise UpstreamError(region, response.status_code, f"malformed order: {exc}") from exc

    # ── Convenience fetches ───────────────────────────────────────────────────

    async def fetch_awaiting_shipment(self, region: StoreRegion) -> list[Order]:
        return await self.fetch_orders(
            region,
            OrderFilter.by_status(OrderStatus.AWAITING_SHIPMENT, self._config.awaiting_orders_limit),
        )

    async def fetch_recent(self, region: StoreRegion) -> list[Order]:
        return await self.fetch_orders(
            region, OrderFilter.most_recent(self._config.recent_orders_limit),
        )

    async def fetch_incomplete(self, region: StoreRegion) -> list[Order]:
        return await self.fetch_orders(
            region,
            OrderFilter.by_status(OrderStatus.INCOMPLETE, self._config.awaiting_orders_limit),
        )

    async def fetch_created_since(self, region: StoreRegion, since: datetime) -> list[Order]:
        return await self.fetch_orders(
            region, OrderFilter.created_since(since, self._config.sales_feed_limit),
        )
