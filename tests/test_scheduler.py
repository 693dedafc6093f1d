"""
Tests for the APScheduler job wiring.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from config.settings import Settings
from models.domain import CheckCycleResult, StoreCheckFailure, StoreRegion
from models.errors import TransportError
from services.sales_map import SalesMapState
from services.scheduler import build_scheduler, run_check_job, run_sales_map_job


def test_jobs_registered_with_configured_intervals():
    config = Settings(_env_file=None, check_interval_hours=6, sales_map_poll_sec=45)
    scheduler = build_scheduler(MagicMock(), MagicMock(), SalesMapState(), config)

    check = scheduler.get_job("order_check")
    sales = scheduler.get_job("sales_map")
    assert check.trigger.interval == timedelta(hours=6)
    assert sales.trigger.interval == timedelta(seconds=45)
    assert check.max_instances == 1 and check.coalesce is True


@pytest.mark.asyncio
async def test_check_job_logs_region_failures(caplog):
    monitor = AsyncMock()
    monitor.run_check.return_value = CheckCycleResult(
        results=[StoreCheckFailure(StoreRegion.UK, "Failed to fetch orders", "[uk] timeout")],
        checked=datetime(2026, 3, 10, tzinfo=timezone.utc),
    )
    with caplog.at_level("WARNING", logger="orderwatch.scheduler"):
        await run_check_job(monitor)
    assert "Failed to fetch orders" in caplog.text


@pytest.mark.asyncio
async def test_sales_map_job_survives_tick_failure(caplog):
    consumer = AsyncMock()
    consumer.tick.side_effect = RuntimeError("postcodes down")
    state = SalesMapState()
    with caplog.at_level("WARNING", logger="orderwatch.scheduler"):
        await run_sales_map_job(consumer, state)
    consumer.tick.assert_awaited_once_with(state)
    assert "postcodes down" in caplog.text


@pytest.mark.asyncio
async def test_check_job_retries_whole_cycle_on_transient_error():
    monitor = AsyncMock()
    monitor.run_check.side_effect = [
        TransportError(StoreRegion.UK, "reset"),
        CheckCycleResult(results=[], checked=datetime(2026, 3, 10, tzinfo=timezone.utc)),
    ]
    await run_check_job(monitor, attempts=1, delay_sec=0)
    assert monitor.run_check.await_count == 2


@pytest.mark.asyncio
async def test_check_job_without_retry_budget_raises():
    monitor = AsyncMock()
    monitor.run_check.side_effect = TransportError(StoreRegion.UK, "reset")
    with pytest.raises(TransportError):
        await run_check_job(monitor)
    assert monitor.run_check.await_count == 1
