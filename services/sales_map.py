"""
Live sales map — feed of newly created orders and the marker state built from it.

SalesFeed          fetches orders created since a cursor and advances it
SalesFeedCursor    explicit "last check" state, owned by whoever polls
SalesMapState      seen order ids, postcode cache, markers, counters
SalesMapConsumer   one tick = poll the feed, then process orders one at a time

Dedup contract: once an order id is in `seen_ids` it never produces a
second marker or counter increment, however many polls return it again.
Orders are processed sequentially within a tick, so check-then-insert on
the seen set cannot race.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Optional

from config.settings import Settings, settings as default_settings
from data.postcodes import PostcodesClient, normalize_postcode
from models.domain import GeoPoint, SaleEvent, StoreRegion

logger = logging.getLogger("orderwatch.sales_map")


def start_of_day(now: Optional[datetime] = None) -> datetime:
    now = now or datetime.now(timezone.utc)
    return datetime.combine(now.date(), time(0, 0), tzinfo=timezone.utc)


# ── Feed ──────────────────────────────────────────────────────────────────────

@dataclass
class SalesFeedCursor:
    """First poll covers everything since midnight UTC of process start."""
    last_check: datetime = field(default_factory=start_of_day)


class SalesFeed:
    def __init__(self, client, region: StoreRegion, config: Settings | None = None) -> None:
        self.client = client
        self.region = StoreRegion(region)
        self.config = config or default_settings

    async def poll(self, cursor: SalesFeedCursor, now: Optional[datetime] = None) -> list[SaleEvent]:
        """
        Return orders created since cursor.last_check, newest first.

        The cursor moves to the instant sampled *before* the fetch, and only
        when the fetch succeeds; anything created mid-fetch is picked up
        again next poll and dropped by the consumer's seen set.
        """
        polled_at = now or datetime.now(timezone.utc)
        orders = await self.client.fetch_created_since(self.region, cursor.last_check)
        cursor.last_check = polled_at
        logger.debug("sales feed region=%s new=%d", self.region.value, len(orders))
        return [SaleEvent.from_order(o) for o in orders]


# ── Map state ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MapMarker:
    order_id: int
    lat: float
    lng: float
    area: str
    time: str                 # HH:MM of order creation
    created_at: datetime


@dataclass
class SalesMapState:
    cursor: SalesFeedCursor = field(default_factory=SalesFeedCursor)
    seen_ids: set[int] = field(default_factory=set)
    geocode_cache: dict[str, GeoPoint] = field(default_factory=dict)
    markers: list[MapMarker] = field(default_factory=list)
    today_count: int = 0
    month_count: int = 0
    counter_day: date = field(default_factory=lambda: datetime.now(timezone.utc).date())

    def roll_counters(self, today: date) -> None:
        """
        Reset the day / month counters when the calendar moves on, and drop
        markers from earlier days. seen_ids is kept so old orders never
        come back as new markers.
        """
        if today == self.counter_day:
            return
        if (today.year, today.month) != (self.counter_day.year, self.counter_day.month):
            self.month_count = 0
        self.today_count = 0
        self.counter_day = today
        self.markers = [
            m for m in self.markers
            if m.created_at.astimezone(timezone.utc).date() >= today
        ]


class SalesMapConsumer:
    def __init__(self, feed: SalesFeed, geocoder: PostcodesClient) -> None:
        self.feed     = feed
        self.geocoder = geocoder

    async def tick(self, state: SalesMapState, now: Optional[datetime] = None) -> list[MapMarker]:
        """Poll once and process the returned orders in order. Returns the new markers."""
        now = now or datetime.now(timezone.utc)
        state.roll_counters(now.date())

        events = await self.feed.poll(state.cursor, now=now)
        added: list[MapMarker] = []
        for event in events:
            marker = await self.process(state, event)
            if marker is not None:
                added.append(marker)

        if added:
            logger.info("sales map: %d new marker(s), today=%d", len(added), state.today_count)
        return added

    async def process(self, state: SalesMapState, event: SaleEvent) -> Optional[MapMarker]:
        if event.id in state.seen_ids:
            return None
        state.seen_ids.add(event.id)

        if not event.zip:
            return None
        point = await self._geocode(state, event.zip)
        if point is None:
            return None

        marker = MapMarker(
            order_id=event.id,
            lat=point.lat,
            lng=point.lng,
            area=point.area,
            time=event.date_created.strftime("%H:%M"),
            created_at=event.date_created,
        )
        state.markers.append(marker)
        state.today_count += 1
        state.month_count += 1
        return marker

    async def _geocode(self, state: SalesMapState, postcode: str) -> Optional[GeoPoint]:
        key = normalize_postcode(postcode)
        cached = state.geocode_cache.get(key)
        if cached is not None:
            return cached
        point = await self.geocoder.lookup(key)
        if point is not None:
            state.geocode_cache[key] = point
        return point
