"""
Core domain models for OrderWatch.

These are plain dataclasses used throughout the service layer.
Raw orders are validated once, at the store-client boundary, by
Order.from_payload(); everything downstream can trust their shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from email.utils import parsedate_to_datetime
from enum import Enum, IntEnum
from typing import Any, Optional


# ── Enums ─────────────────────────────────────────────────────────────────────

class StoreRegion(str, Enum):
    UK = "uk"
    US = "us"

    @property
    def currency_code(self) -> str:
        return _REGION_CURRENCY[self][0]

    @property
    def currency_symbol(self) -> str:
        return _REGION_CURRENCY[self][1]

    @property
    def label(self) -> str:
        return self.value.upper()


_REGION_CURRENCY: dict[StoreRegion, tuple[str, str]] = {
    StoreRegion.UK: ("GBP", "£"),
    StoreRegion.US: ("USD", "$"),
}


class OrderStatus(IntEnum):
    """BigCommerce v2 order status ids."""
    INCOMPLETE           = 0    # checkout started, never completed
    PENDING              = 1
    SHIPPED              = 2
    PARTIALLY_SHIPPED    = 3
    REFUNDED             = 4
    CANCELLED            = 5
    DECLINED             = 6
    AWAITING_PAYMENT     = 7
    AWAITING_PICKUP      = 8
    AWAITING_SHIPMENT    = 9    # paid, not yet shipped
    COMPLETED            = 10
    AWAITING_FULFILLMENT = 11
    MANUAL_VERIFICATION  = 12
    DISPUTED             = 13
    PARTIALLY_REFUNDED   = 14


class AlertCategory(str, Enum):
    OVERDUE_UNSHIPPED = "overdue_unshipped"
    STUCK_INCOMPLETE  = "stuck_incomplete"
    HAS_COMMENT       = "has_comment"


# ── Helpers ───────────────────────────────────────────────────────────────────

def parse_bc_datetime(value: str) -> datetime:
    """
    Parse a BigCommerce timestamp into an aware UTC datetime.

    v2 returns RFC 2822 ("Tue, 20 Nov 2012 00:00:00 +0000"); ISO-8601 is
    accepted too. Naive values are taken as UTC.
    """
    if not value or not str(value).strip():
        raise ValueError("empty timestamp")
    text = str(value).strip()
    try:
        parsed = parsedate_to_datetime(text)
    except (TypeError, ValueError):
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _str(value: Any) -> str:
    return "" if value is None else str(value)


def _decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value)) if value not in (None, "") else Decimal("0")
    except InvalidOperation:
        raise ValueError(f"invalid money amount: {value!r}")


# ── Raw order ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BillingAddress:
    first_name: str = ""
    last_name:  str = ""
    company:    str = ""
    email:      str = ""
    zip:        str = ""
    city:       str = ""
    country:    str = ""

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> "BillingAddress":
        payload = payload or {}
        return cls(
            first_name=_str(payload.get("first_name")),
            last_name=_str(payload.get("last_name")),
            company=_str(payload.get("company")),
            email=_str(payload.get("email")),
            zip=_str(payload.get("zip")),
            city=_str(payload.get("city")),
            country=_str(payload.get("country")),
        )


@dataclass(frozen=True)
class Order:
    """One BigCommerce order as returned by GET /v2/orders. Immutable for a check cycle."""
    id: int
    date_created: datetime
    status: str
    status_id: int
    total_inc_tax: Decimal
    billing_address: BillingAddress = field(default_factory=BillingAddress)
    customer_message: str = ""
    items_total: int = 0
    customer_id: int = 0

    @classmethod
    def from_payload(cls, payload: dict) -> "Order":
        """
        Validate and normalise a raw order dict.

        id and date_created are required; everything else defaults
        deterministically (empty string / zero). Raises ValueError on a
        malformed record.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"order payload must be an object, got {type(payload).__name__}")
        if payload.get("id") is None:
            raise ValueError("order payload missing id")
        try:
            order_id = int(payload["id"])
            status_id = int(payload.get("status_id") or 0)
            items_total = int(payload.get("items_total") or 0)
            customer_id = int(payload.get("customer_id") or 0)
        except (TypeError, ValueError):
            raise ValueError(f"order {payload.get('id')!r} has a non-integer id field")
        return cls(
            id=order_id,
            date_created=parse_bc_datetime(payload.get("date_created")),
            status=_str(payload.get("status")),
            status_id=status_id,
            total_inc_tax=_decimal(payload.get("total_inc_tax")),
            billing_address=BillingAddress.from_payload(payload.get("billing_address")),
            customer_message=_str(payload.get("customer_message")),
            items_total=items_total,
            customer_id=customer_id,
        )

    @property
    def has_comment(self) -> bool:
        return bool(self.customer_message.strip())


# ── Enriched order ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class EnrichedOrder:
    """Order + engine-derived fields. Recomputed every cycle, never persisted."""
    order: Order
    age_minutes: int
    age_hours: int
    is_overdue: bool
    region: StoreRegion
    store_hash: str                     # region identity: admin links + currency lookup

    @property
    def id(self) -> int:
        return self.order.id

    @property
    def currency_symbol(self) -> str:
        return self.region.currency_symbol

    @property
    def admin_url(self) -> str:
        return f"https://store-{self.store_hash}.mybigcommerce.com/manage/orders/{self.order.id}"

    @property
    def customer_name(self) -> str:
        billing = self.order.billing_address
        if billing.company:
            return billing.company
        return f"{billing.first_name} {billing.last_name}".strip()


# ── Classification ────────────────────────────────────────────────────────────

@dataclass
class ClassifiedView:
    """
    Per-store, per-cycle classification.

    overdue / incomplete_stuck / commented are the alert categories; an
    order can sit in more than one. awaiting / incomplete / recent are
    the full fetched sets kept for the dashboard.
    """
    region: StoreRegion
    awaiting: list[EnrichedOrder] = field(default_factory=list)
    overdue: list[EnrichedOrder] = field(default_factory=list)
    incomplete: list[EnrichedOrder] = field(default_factory=list)
    incomplete_stuck: list[EnrichedOrder] = field(default_factory=list)
    recent: list[EnrichedOrder] = field(default_factory=list)
    commented: list[EnrichedOrder] = field(default_factory=list)
    evaluated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def categories_for(self, order_id: int) -> set[AlertCategory]:
        found: set[AlertCategory] = set()
        if any(o.id == order_id for o in self.overdue):
            found.add(AlertCategory.OVERDUE_UNSHIPPED)
        if any(o.id == order_id for o in self.incomplete_stuck):
            found.add(AlertCategory.STUCK_INCOMPLETE)
        if any(o.id == order_id for o in self.commented):
            found.add(AlertCategory.HAS_COMMENT)
        return found


# ── Check cycle results ───────────────────────────────────────────────────────

@dataclass
class StoreCheckResult:
    store: StoreRegion
    overdue_count: int
    incomplete_count: int
    commented_count: int
    overdue_sent: bool = False
    incomplete_sent: bool = False
    commented_sent: bool = False

    def to_payload(self) -> dict:
        return {
            "store":               self.store.value,
            "overdueOrders":       self.overdue_count,
            "incompleteOrders":    self.incomplete_count,
            "ordersWithComments":  self.commented_count,
            "overdueEmailSent":    self.overdue_sent,
            "incompleteEmailSent": self.incomplete_sent,
            "commentsEmailSent":   self.commented_sent,
        }


@dataclass
class StoreCheckFailure:
    """A region whose fetch failed this cycle. Siblings are unaffected."""
    store: StoreRegion
    error: str
    details: str

    def to_payload(self) -> dict:
        return {"store": self.store.value, "error": self.error, "details": self.details}


@dataclass
class CheckCycleResult:
    results: list[StoreCheckResult | StoreCheckFailure]
    checked: datetime

    @property
    def failures(self) -> list[StoreCheckFailure]:
        return [r for r in self.results if isinstance(r, StoreCheckFailure)]

    def to_payload(self) -> dict:
        return {
            "success": True,
            "results": [r.to_payload() for r in self.results],
            "checked": self.checked.isoformat(),
        }


# ── Live sales map ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SaleEvent:
    """Slim order projection served to the live sales map."""
    id: int
    date_created: datetime
    status: str
    total: Decimal
    zip: str = ""
    city: str = ""
    country: str = ""

    @classmethod
    def from_order(cls, order: Order) -> "SaleEvent":
        billing = order.billing_address
        return cls(
            id=order.id,
            date_created=order.date_created,
            status=order.status,
            total=order.total_inc_tax,
            zip=billing.zip,
            city=billing.city,
            country=billing.country,
        )


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float
    area: str
