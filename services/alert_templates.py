"""
HTML email bodies for the three alert tracks.

Each renderer returns (subject, html). Customer-supplied text (names,
comments) is escaped; everything else comes from our own fields.
"""

from __future__ import annotations

from html import escape
from typing import Callable, Sequence

from models.domain import EnrichedOrder, StoreRegion

_ACCENT = "#E8A33C"
_DARK   = "#4A4A4A"
_CELL   = "padding: 12px; border-bottom: 1px solid #eee;"
_HEAD   = f"padding: 12px; text-align: left; border-bottom: 2px solid {_ACCENT};"


# ── Helpers ───────────────────────────────────────────────────────────────────

def _plural(count: int, singular: str, plural: str | None = None) -> str:
    return singular if count == 1 else (plural or f"{singular}s")


def _money(order: EnrichedOrder) -> str:
    return f"{order.currency_symbol}{order.order.total_inc_tax:.2f}"


def _date(order: EnrichedOrder) -> str:
    return order.order.date_created.strftime("%d/%m/%Y")


def _format_minutes(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}m"
    return f"{minutes // 60}h {minutes % 60}m"


def _store_url(orders: Sequence[EnrichedOrder]) -> str:
    store_hash = orders[0].store_hash if orders else ""
    return f"https://store-{store_hash}.mybigcommerce.com/manage/orders"


def _layout(title: str, intro: str, columns: list[str], rows: str, button_url: str) -> str:
    head = "".join(f'<th style="{_HEAD}">{escape(c)}</th>' for c in columns)
    return f"""
    <div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 640px; margin: 0 auto;">
      <div style="padding: 30px; background: #fff;">
        <h1 style="color: {_DARK}; margin: 0 0 10px 0; font-size: 24px;">{escape(title)}</h1>
        <p style="color: #666; margin: 0 0 20px 0;">{intro}</p>
        <table style="width: 100%; border-collapse: collapse; margin-bottom: 20px;">
          <thead><tr style="background: #F5F5F5;">{head}</tr></thead>
          <tbody>{rows}</tbody>
        </table>
        <a href="{escape(button_url)}"
           style="display: inline-block; background: {_ACCENT}; color: #fff; padding: 12px 24px; text-decoration: none; border-radius: 4px; font-weight: 500;">
          View in BigCommerce
        </a>
      </div>
      <div style="background: {_DARK}; padding: 15px; text-align: center; color: #999; font-size: 12px;">
        GTSE Orders Monitor
      </div>
    </div>
    """


def _rows(orders: Sequence[EnrichedOrder], cells: Callable[[EnrichedOrder], list[str]]) -> str:
    out = []
    for order in orders:
        tds = "".join(f'<td style="{_CELL}">{cell}</td>' for cell in cells(order))
        out.append(f"<tr>{tds}</tr>")
    return "".join(out)


def _order_link(order: EnrichedOrder) -> str:
    return f'<a href="{escape(order.admin_url)}">#{order.id}</a>'


# ── Renderers ─────────────────────────────────────────────────────────────────

def render_overdue_alert(
    region: StoreRegion,
    orders: Sequence[EnrichedOrder],
    threshold_hours: int,
) -> tuple[str, str]:
    n = len(orders)
    subject = (
        f"⚠️ [{region.label}] {n} Unshipped {_plural(n, 'Order')} Require Attention"
    )
    intro = (
        f"{n} {_plural(n, 'order has', 'orders have')} exceeded the "
        f"{threshold_hours} hour shipping threshold."
    )
    rows = _rows(orders, lambda o: [
        _order_link(o),
        escape(o.customer_name),
        _date(o),
        f'<span style="color: {_ACCENT}; font-weight: bold;">{o.age_hours}h</span>',
        _money(o),
    ])
    html = _layout(
        f"Unshipped Orders Alert ({region.label})", intro,
        ["Order", "Customer", "Date", "Hours Open", "Total"], rows,
        _store_url(orders),
    )
    return subject, html


def render_incomplete_alert(
    region: StoreRegion,
    orders: Sequence[EnrichedOrder],
    threshold_minutes: int,
) -> tuple[str, str]:
    n = len(orders)
    subject = f"🛒 [{region.label}] {n} Incomplete {_plural(n, 'Checkout')} Need Follow-up"
    intro = (
        f"{n} {_plural(n, 'checkout has', 'checkouts have')} been incomplete for "
        f"{threshold_minutes}+ minutes."
    )
    rows = _rows(orders, lambda o: [
        _order_link(o),
        escape(o.customer_name),
        escape(o.order.billing_address.email),
        _format_minutes(o.age_minutes),
        _money(o),
    ])
    html = _layout(
        f"Incomplete Checkouts ({region.label})", intro,
        ["Order", "Customer", "Email", "Waiting", "Total"], rows,
        _store_url(orders),
    )
    return subject, html


def render_comments_alert(
    region: StoreRegion,
    orders: Sequence[EnrichedOrder],
) -> tuple[str, str]:
    n = len(orders)
    subject = f"💬 [{region.label}] {n} {_plural(n, 'Order')} with Customer Comments"
    intro = f"{n} {_plural(n, 'order has a', 'orders have')} customer {_plural(n, 'comment')} to read."
    rows = _rows(orders, lambda o: [
        _order_link(o),
        escape(o.customer_name),
        escape(o.order.status),
        f'<em>{escape(o.order.customer_message.strip())}</em>',
    ])
    html = _layout(
        f"Customer Comments ({region.label})", intro,
        ["Order", "Customer", "Status", "Comment"], rows,
        _store_url(orders),
    )
    return subject, html
