"""
Tests for ResendNotifier and the alert email templates.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest

from models.domain import BillingAddress, EnrichedOrder, Order, StoreRegion
from models.errors import NotifierError
from services.alert_templates import (
    render_comments_alert,
    render_incomplete_alert,
    render_overdue_alert,
)
from services.notifier import ResendNotifier

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def enriched(id: int = 1, message: str = "", company: str = "", region=StoreRegion.UK) -> EnrichedOrder:
    return EnrichedOrder(
        order=Order(
            id=id, date_created=NOW - timedelta(hours=30), status="Awaiting Shipment",
            status_id=9, total_inc_tax=Decimal("1234.5"), customer_message=message,
            billing_address=BillingAddress(first_name="Ada", last_name="Lovelace", company=company),
        ),
        age_minutes=30 * 60, age_hours=30, is_overdue=True, region=region, store_hash="abc",
    )


# ── ResendNotifier ────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_resend_success_posts_email():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "email_123"})

    notifier = ResendNotifier(
        "re_key", "Orders <alerts@example.com>", base_url="https://resend.test",
        transport=httpx.MockTransport(handler),
    )
    assert await notifier.send("ops@example.com", "subj", "<p>hi</p>") is True

    [request] = seen
    assert request.url.path == "/emails"
    assert request.headers["Authorization"] == "Bearer re_key"
    body = json.loads(request.content)
    assert body["to"] == ["ops@example.com"]
    assert body["subject"] == "subj"


@pytest.mark.asyncio
async def test_resend_rejection_raises_notifier_error():
    notifier = ResendNotifier(
        "re_key", "from@example.com",
        transport=httpx.MockTransport(lambda r: httpx.Response(422, json={"message": "bad"})),
    )
    with pytest.raises(NotifierError) as excinfo:
        await notifier.send("ops@example.com", "subj", "html")
    assert excinfo.value.status_code == 422


@pytest.mark.asyncio
async def test_resend_network_failure_raises_notifier_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out")

    notifier = ResendNotifier("re_key", "from@example.com", transport=httpx.MockTransport(handler))
    with pytest.raises(NotifierError, match="unreachable"):
        await notifier.send("ops@example.com", "subj", "html")


@pytest.mark.asyncio
async def test_resend_without_api_key_raises():
    with pytest.raises(NotifierError, match="not configured"):
        await ResendNotifier("", "from@example.com").send("ops@example.com", "s", "h")


# ── Templates ─────────────────────────────────────────────────────────────────

class TestTemplates:
    def test_overdue_subject_and_rows(self):
        subject, html = render_overdue_alert(StoreRegion.UK, [enriched(1), enriched(2)], 24)
        assert "2 Unshipped Orders" in subject
        assert "[UK]" in subject
        assert "24 hour shipping threshold" in html
        assert "£1234.50" in html
        assert "30h" in html
        assert "https://store-abc.mybigcommerce.com/manage/orders/1" in html

    def test_singular_subject(self):
        subject, html = render_overdue_alert(StoreRegion.US, [enriched(1, region=StoreRegion.US)], 24)
        assert "1 Unshipped Order Require" in subject
        assert "1 order has exceeded" in html
        assert "$1234.50" in html

    def test_incomplete_shows_waiting_time(self):
        _, html = render_incomplete_alert(StoreRegion.UK, [enriched(1)], 15)
        assert "30h 0m" in html
        assert "15+ minutes" in html

    def test_comment_text_is_escaped(self):
        _, html = render_comments_alert(StoreRegion.UK, [enriched(1, message="<script>x</script>")])
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_company_name_used_when_present(self):
        _, html = render_comments_alert(StoreRegion.UK, [enriched(1, message="hi", company="Acme & Co")])
        assert "Acme &amp; Co" in html
