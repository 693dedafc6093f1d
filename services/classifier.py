"""
Classification engine — labels enriched orders into alert categories.

Categories are independent predicates, not a partition:
  overdue           awaiting-shipment orders with is_overdue
  incomplete_stuck  incomplete-status orders aged >= incomplete threshold
  commented         distinct-by-id orders with a non-blank customer message,
                    drawn from awaiting + recent + incomplete in that order

Everything is computed per region; order ids are only unique within a
store, so no cross-region deduplication happens here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from models.domain import ClassifiedView, EnrichedOrder, Order, OrderStatus, StoreRegion
from services.enricher import enrich


def sort_by_age_hours(orders: Iterable[EnrichedOrder]) -> list[EnrichedOrder]:
    """Most overdue first; equal ages fall back to ascending order id."""
    return sorted(orders, key=lambda o: (-o.age_hours, o.id))


def sort_by_age_minutes(orders: Iterable[EnrichedOrder]) -> list[EnrichedOrder]:
    return sorted(orders, key=lambda o: (-o.age_minutes, o.id))


def select_overdue(awaiting: Iterable[EnrichedOrder]) -> list[EnrichedOrder]:
    return sort_by_age_hours(o for o in awaiting if o.is_overdue)


def select_stuck_incomplete(
    incomplete: Iterable[EnrichedOrder],
    threshold_minutes: int,
) -> list[EnrichedOrder]:
    return sort_by_age_minutes(
        o for o in incomplete
        if o.order.status_id == OrderStatus.INCOMPLETE and o.age_minutes >= threshold_minutes
    )


def select_commented(*sources: Iterable[EnrichedOrder]) -> list[EnrichedOrder]:
    """
    Stable, first-occurrence-wins dedup over the concatenated sources,
    keeping only orders whose trimmed customer message is non-empty.

    The sources routinely overlap (an awaiting order is usually also among
    the most recent), so every id is claimed the first time it is seen,
    commented or not.
    """
    seen: set[int] = set()
    commented: list[EnrichedOrder] = []
    for source in sources:
        for order in source:
            if order.id in seen:
                continue
            seen.add(order.id)
            if order.order.has_comment:
                commented.append(order)
    return commented


def classify(
    region: StoreRegion,
    awaiting: list[EnrichedOrder],
    recent: list[EnrichedOrder],
    incomplete: list[EnrichedOrder],
    *,
    incomplete_threshold_minutes: int,
    evaluated_at: Optional[datetime] = None,
) -> ClassifiedView:
    """Build the ClassifiedView for one store from its three fetched sets."""
    return ClassifiedView(
        region=StoreRegion(region),
        awaiting=sort_by_age_hours(awaiting),
        overdue=select_overdue(awaiting),
        incomplete=sort_by_age_minutes(incomplete),
        incomplete_stuck=select_stuck_incomplete(incomplete, incomplete_threshold_minutes),
        recent=list(recent),
        commented=select_commented(awaiting, recent, incomplete),
        evaluated_at=evaluated_at or datetime.now(timezone.utc),
    )


def build_view(
    region: StoreRegion,
    awaiting: list[Order],
    recent: list[Order],
    incomplete: list[Order],
    *,
    now: datetime,
    store_hash: str,
    threshold_hours: int,
    incomplete_threshold_minutes: int,
) -> ClassifiedView:
    """Enrich all three raw sets against one `now`, then classify."""
    def _enrich(orders: list[Order]) -> list[EnrichedOrder]:
        return enrich(
            orders, region, now, store_hash=store_hash, threshold_hours=threshold_hours,
        )

    return classify(
        region,
        _enrich(awaiting),
        _enrich(recent),
        _enrich(incomplete),
        incomplete_threshold_minutes=incomplete_threshold_minutes,
        evaluated_at=now,
    )
