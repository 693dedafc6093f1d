"""
Pydantic request/response schemas for the dashboard API.

Top-level response keys are camelCase (the dashboard's wire contract);
order records keep BigCommerce's snake_case field names.
Amounts are serialised as strings to avoid JSON float precision loss.
Timestamps are ISO-8601 UTC strings.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models.domain import ClassifiedView, EnrichedOrder, SaleEvent
from services.sales_map import MapMarker, SalesMapState


# ── Helpers ───────────────────────────────────────────────────────────────────

def _dt(dt: datetime | None) -> str | None:
    """Convert datetime | None → ISO-8601 UTC string or None."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def _dec(d: Decimal | float | None) -> str:
    """Convert Decimal | float | None → str."""
    if d is None:
        return "0"
    return str(d)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Order schemas ─────────────────────────────────────────────────────────────

class BillingAddressOut(BaseModel):
    first_name: str
    last_name: str
    company: str
    email: str


class OrderOut(BaseModel):
    id: int
    date_created: str
    status: str
    status_id: int
    total_inc_tax: str
    currency: str
    billing_address: BillingAddressOut
    customer_name: str
    customer_message: str
    items_total: int
    hours_open: int
    minutes_open: int
    is_overdue: bool
    region: str
    admin_url: str

    @classmethod
    def from_enriched(cls, e: EnrichedOrder) -> "OrderOut":
        o = e.order
        b = o.billing_address
        return cls(
            id=o.id,
            date_created=_dt(o.date_created),
            status=o.status,
            status_id=o.status_id,
            total_inc_tax=_dec(o.total_inc_tax),
            currency=e.region.currency_code,
            billing_address=BillingAddressOut(
                first_name=b.first_name, last_name=b.last_name,
                company=b.company, email=b.email,
            ),
            customer_name=e.customer_name,
            customer_message=o.customer_message,
            items_total=o.items_total,
            hours_open=e.age_hours,
            minutes_open=e.age_minutes,
            is_overdue=e.is_overdue,
            region=e.region.value,
            admin_url=e.admin_url,
        )


def _orders(items: list[EnrichedOrder]) -> list[OrderOut]:
    return [OrderOut.from_enriched(e) for e in items]


class OrdersResponse(_CamelModel):
    store: str
    orders: list[OrderOut]
    overdue_orders: list[OrderOut]
    recent_orders: list[OrderOut]
    incomplete_orders: list[OrderOut]
    incomplete_stuck: list[OrderOut]
    orders_with_comments: list[OrderOut]
    total: int
    overdue: int
    incomplete_alerts: int
    threshold_hours: int
    incomplete_threshold_minutes: int
    last_checked: str

    @classmethod
    def from_view(
        cls,
        view: ClassifiedView,
        threshold_hours: int,
        incomplete_threshold_minutes: int,
    ) -> "OrdersResponse":
        return cls(
            store=view.region.value,
            orders=_orders(view.awaiting),
            overdue_orders=_orders(view.overdue),
            recent_orders=_orders(view.recent),
            incomplete_orders=_orders(view.incomplete),
            incomplete_stuck=_orders(view.incomplete_stuck),
            orders_with_comments=_orders(view.commented),
            total=len(view.awaiting),
            overdue=len(view.overdue),
            incomplete_alerts=len(view.incomplete_stuck),
            threshold_hours=threshold_hours,
            incomplete_threshold_minutes=incomplete_threshold_minutes,
            last_checked=_dt(view.evaluated_at),
        )


# ── Sales map schemas ─────────────────────────────────────────────────────────

class SaleAddressOut(BaseModel):
    zip: str
    city: str
    country: str


class SaleOut(BaseModel):
    id: int
    date_created: str
    status: str
    total: str
    billing_address: Optional[SaleAddressOut] = None

    @classmethod
    def from_event(cls, e: SaleEvent) -> "SaleOut":
        has_address = any((e.zip, e.city, e.country))
        return cls(
            id=e.id,
            date_created=_dt(e.date_created),
            status=e.status,
            total=_dec(e.total),
            billing_address=SaleAddressOut(zip=e.zip, city=e.city, country=e.country)
            if has_address else None,
        )


class SalesFeedResponse(_CamelModel):
    orders: list[SaleOut]
    count: int
    last_check: str


class MarkerOut(_CamelModel):
    order_id: int
    lat: float
    lng: float
    area: str
    time: str

    @classmethod
    def from_marker(cls, m: MapMarker) -> "MarkerOut":
        return cls(order_id=m.order_id, lat=m.lat, lng=m.lng, area=m.area, time=m.time)


class MarkersResponse(_CamelModel):
    markers: list[MarkerOut]
    today_count: int
    month_count: int

    @classmethod
    def from_state(cls, state: SalesMapState) -> "MarkersResponse":
        return cls(
            markers=[MarkerOut.from_marker(m) for m in state.markers],
            today_count=state.today_count,
            month_count=state.month_count,
        )


# ── Auth schemas ──────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    password: str
