"""
Dashboard API — integration tests over ASGITransport.

Groups:
  A. Check endpoint (2)
  B. Orders endpoint (4)
  C. Auth (3)
  D. Sales map (3)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.app import create_app
from api.auth import SESSION_COOKIE, issue_session_token
from config.settings import Settings
from models.domain import (
    BillingAddress,
    CheckCycleResult,
    ClassifiedView,
    EnrichedOrder,
    Order,
    SaleEvent,
    StoreCheckFailure,
    StoreCheckResult,
    StoreRegion,
)
from models.errors import ConfigError
from services.sales_map import MapMarker, SalesMapState

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)
SECRET = "test-session-secret-with-enough-length"


def make_settings() -> Settings:
    return Settings(
        _env_file=None,
        uk_store_hash="ukhash", uk_access_token="t",
        dashboard_password="letmein",
        session_secret=SECRET,
    )


# ── Service stubs ─────────────────────────────────────────────────────────────


class _StubMonitor:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    async def run_check(self):
        if self.error:
            raise self.error
        return CheckCycleResult(
            results=[
                StoreCheckResult(store=StoreRegion.UK, overdue_count=2, incomplete_count=0,
                                 commented_count=0, overdue_sent=True),
                StoreCheckFailure(store=StoreRegion.US, error="Region not configured",
                                  details="[us] BigCommerce credentials not configured"),
            ],
            checked=NOW,
        )


class _StubQuery:
    async def query(self, region):
        if region is StoreRegion.US:
            raise ConfigError(region, "BigCommerce credentials not configured")
        order = EnrichedOrder(
            order=Order(
                id=101, date_created=NOW - timedelta(hours=30), status="Awaiting Shipment",
                status_id=9, total_inc_tax=Decimal("49.9"), customer_message="gift wrap",
                billing_address=BillingAddress(first_name="Grace", last_name="Hopper"),
            ),
            age_minutes=1800, age_hours=30, is_overdue=True,
            region=StoreRegion.UK, store_hash="ukhash",
        )
        return ClassifiedView(
            region=StoreRegion.UK, awaiting=[order], overdue=[order],
            commented=[order], evaluated_at=NOW,
        )


class _StubFeed:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error

    async def poll(self, cursor, now=None):
        if self.error:
            raise self.error
        cursor.last_check = NOW
        return [SaleEvent(id=7, date_created=NOW, status="Pending", total=Decimal("15"),
                          zip="SW1A 1AA", city="London", country="United Kingdom")]


def _build(monitor=None, feed=None, state=None):
    return create_app(
        monitor or _StubMonitor(), _StubQuery(), feed or _StubFeed(),
        sales_state=state, config=make_settings(),
    )


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=_build()), base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def authed_client():
    async with AsyncClient(transport=ASGITransport(app=_build()), base_url="http://test") as c:
        c.cookies.set(SESSION_COOKIE, issue_session_token(make_settings()))
        yield c


# ═══════════════════════════════════════════════════════════════════════════════
# A. Check endpoint
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_check_reports_every_region_without_auth(client):
    resp = await client.get("/api/check")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["checked"] == "2026-03-10T12:00:00+00:00"
    uk, us = body["results"]
    assert uk["store"] == "uk" and uk["overdueOrders"] == 2 and uk["overdueEmailSent"] is True
    assert us == {"store": "us", "error": "Region not configured",
                  "details": "[us] BigCommerce credentials not configured"}


@pytest.mark.asyncio
async def test_check_crash_returns_500_with_details():
    app = _build(monitor=_StubMonitor(RuntimeError("boom")))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        resp = await c.get("/api/check")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to check orders", "details": "boom"}


# ═══════════════════════════════════════════════════════════════════════════════
# B. Orders endpoint
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_orders_requires_session(client):
    resp = await client.get("/api/orders?store=uk")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}


@pytest.mark.asyncio
async def test_orders_view_for_uk(authed_client):
    resp = await authed_client.get("/api/orders", params={"store": "uk"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["store"] == "uk"
    assert (body["total"], body["overdue"], body["incompleteAlerts"]) == (1, 1, 0)
    assert body["thresholdHours"] == 24
    assert body["incompleteThresholdMinutes"] == 15
    order = body["overdueOrders"][0]
    assert order["id"] == 101
    assert order["hours_open"] == 30
    assert order["customer_name"] == "Grace Hopper"
    assert order["currency"] == "GBP"
    assert body["ordersWithComments"][0]["customer_message"] == "gift wrap"


@pytest.mark.asyncio
async def test_orders_invalid_store_is_400(authed_client):
    resp = await authed_client.get("/api/orders", params={"store": "eu"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid store parameter"}


@pytest.mark.asyncio
async def test_orders_unconfigured_region_is_500(authed_client):
    resp = await authed_client.get("/api/orders", params={"store": "us"})
    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Failed to fetch orders"
    assert "not configured" in body["details"]


# ═══════════════════════════════════════════════════════════════════════════════
# C. Auth
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_wrong_password(client):
    resp = await client.post("/api/login", json={"password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "error": "Invalid password"}


@pytest.mark.asyncio
async def test_login_sets_cookie_that_unlocks_api(client):
    resp = await client.post("/api/login", json={"password": "letmein"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    token = resp.cookies.get(SESSION_COOKIE)
    assert token

    client.cookies.set(SESSION_COOKIE, token)
    assert (await client.get("/api/orders")).status_code == 200


@pytest.mark.asyncio
async def test_tampered_cookie_rejected(client):
    client.cookies.set(SESSION_COOKIE, issue_session_token(make_settings()) + "x")
    assert (await client.get("/api/sales-map/markers")).status_code == 401


# ═══════════════════════════════════════════════════════════════════════════════
# D. Sales map
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_sales_feed_returns_new_orders(authed_client):
    resp = await authed_client.get("/api/sales-map/orders")
    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 1
    assert body["lastCheck"] == "2026-03-10T12:00:00+00:00"
    [sale] = body["orders"]
    assert sale["id"] == 7
    assert sale["billing_address"]["zip"] == "SW1A 1AA"


@pytest.mark.asyncio
async def test_sales_feed_error_is_soft():
    app = _build(feed=_StubFeed(RuntimeError("upstream down")))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        c.cookies.set(SESSION_COOKIE, issue_session_token(make_settings()))
        resp = await c.get("/api/sales-map/orders")
    assert resp.status_code == 200
    assert resp.json() == {"orders": [], "error": "upstream down"}


@pytest.mark.asyncio
async def test_markers_reflect_consumer_state():
    state = SalesMapState(today_count=1, month_count=5, counter_day=NOW.date())
    state.markers.append(MapMarker(order_id=7, lat=51.5, lng=-0.14, area="Westminster",
                                   time="12:00", created_at=NOW))
    app = _build(state=state)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        c.cookies.set(SESSION_COOKIE, issue_session_token(make_settings()))
        resp = await c.get("/api/sales-map/markers")
    assert resp.json() == {
        "markers": [{"orderId": 7, "lat": 51.5, "lng": -0.14, "area": "Westminster", "time": "12:00"}],
        "todayCount": 1,
        "monthCount": 5,
    }
