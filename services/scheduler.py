"""
APScheduler wiring for the two periodic jobs:

  order_check   every check_interval_hours — OrderMonitor.run_check()
  sales_map     every sales_map_poll_sec   — SalesMapConsumer.tick(state)

max_instances=1 keeps cycles serialised; a slow cycle makes the next
trigger skip rather than overlap.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config.settings import Settings
from services.order_monitor import OrderMonitor
from services.retry import with_retries
from services.sales_map import SalesMapConsumer, SalesMapState

logger = logging.getLogger("orderwatch.scheduler")


async def run_check_job(
    monitor: OrderMonitor,
    attempts: int = 0,
    delay_sec: float = 0.0,
) -> None:
    """
    One scheduled check cycle. Region failures are reported inside the cycle
    and are not retried; only a transient error escaping run_check() re-runs
    the whole job.
    """
    cycle = await with_retries(monitor.run_check, attempts, delay_sec, label="order check")
    for failure in cycle.failures:
        logger.warning("scheduled check: %s %s (%s)", failure.store.value, failure.error, failure.details)


async def run_sales_map_job(consumer: SalesMapConsumer, state: SalesMapState) -> None:
    try:
        await consumer.tick(state)
    except Exception as exc:
        # Next tick retries from the same cursor; the map shows stale data meanwhile.
        logger.warning("sales map tick failed (will retry): %s", exc)


def build_scheduler(
    monitor: OrderMonitor,
    consumer: SalesMapConsumer,
    state: SalesMapState,
    config: Settings,
) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        run_check_job,
        trigger="interval",
        hours=config.check_interval_hours,
        args=[monitor, config.check_retry_attempts, config.check_retry_delay_sec],
        id="order_check",
        name="Order check cycle",
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        run_sales_map_job,
        trigger="interval",
        seconds=config.sales_map_poll_sec,
        args=[consumer, state],
        id="sales_map",
        name="Sales map poll",
        max_instances=1,
        coalesce=True,
    )
    return scheduler
