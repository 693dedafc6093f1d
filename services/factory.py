"""
Production object graph: store client, notifier, dispatcher, monitor,
query service and sales-map feed/consumer, all built from Settings.
"""

from __future__ import annotations

import httpx

from config.settings import Settings, settings as default_settings
from data.bigcommerce import BigCommerceClient
from data.postcodes import PostcodesClient
from services.dispatcher import AlertDispatcher
from services.notifier import ResendNotifier
from services.order_monitor import OrderMonitor
from services.query import OrderQueryService
from services.sales_map import SalesFeed, SalesMapConsumer


def build_services(
    config: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
):
    """
    Wire the production object graph. Returns (monitor, query_service, sales_feed, consumer).

    `transport` is handed to the BigCommerce client only; tests use it to
    stand in for the store API.
    """
    config = config or default_settings
    client = BigCommerceClient(config, transport=transport)

    notifier = ResendNotifier(
        api_key=config.resend_api_key,
        sender=config.resend_from,
        base_url=config.resend_base_url,
    )
    dispatcher = AlertDispatcher(
        notifier,
        alert_email=config.alert_email,
        threshold_hours=config.threshold_hours,
        incomplete_threshold_minutes=config.incomplete_threshold_minutes,
    )
    # A region's fetch failure is final for its cycle; no per-fetch retry.
    monitor = OrderMonitor(client, dispatcher, config)
    query_service = OrderQueryService(client, config)
    sales_feed = SalesFeed(client, config.sales_map_region, config)
    consumer = SalesMapConsumer(
        SalesFeed(client, config.sales_map_region, config),
        PostcodesClient(config.postcodes_base_url),
    )
    return monitor, query_service, sales_feed, consumer
