"""
Age & identity enricher.

Pure function: no I/O, no clock access. The caller samples `now` once per
cycle and passes it in, so every order in a batch is aged against the same
instant and relative ordering by age is stable.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from models.domain import EnrichedOrder, Order, StoreRegion


def _raise_if_naive(dt: datetime, name: str = "now") -> None:
    if dt.tzinfo is None or dt.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware, got naive datetime: {dt!r}")


def age_minutes(created_at: datetime, now: datetime) -> int:
    """Whole minutes between created_at and now, clamped at zero for clock skew."""
    seconds = (now - created_at).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)


def enrich(
    orders: Iterable[Order],
    region: StoreRegion,
    now: datetime,
    *,
    store_hash: str,
    threshold_hours: int,
) -> list[EnrichedOrder]:
    """Attach age, overdue flag and region identity to each order, preserving input order."""
    _raise_if_naive(now)
    region = StoreRegion(region)

    enriched: list[EnrichedOrder] = []
    for order in orders:
        minutes = age_minutes(order.date_created, now)
        hours = minutes // 60
        enriched.append(
            EnrichedOrder(
                order=order,
                age_minutes=minutes,
                age_hours=hours,
                is_overdue=hours >= threshold_hours,
                region=region,
                store_hash=store_hash,
            )
        )
    return enriched
