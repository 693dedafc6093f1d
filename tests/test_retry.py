"""
Tests for the job-level retry helper.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from models.domain import StoreRegion
from models.errors import ConfigError, TransportError, UpstreamError
from services.retry import is_retryable, with_retries


class TestIsRetryable:
    def test_transport_errors_retry(self):
        assert is_retryable(TransportError(StoreRegion.UK, "reset"))

    @pytest.mark.parametrize("status", [500, 502, 503, 429])
    def test_server_side_statuses_retry(self, status):
        assert is_retryable(UpstreamError(StoreRegion.UK, status))

    @pytest.mark.parametrize("status", [400, 401, 404])
    def test_client_side_statuses_do_not_retry(self, status):
        assert not is_retryable(UpstreamError(StoreRegion.UK, status))

    def test_config_errors_do_not_retry(self):
        assert not is_retryable(ConfigError(StoreRegion.UK, "missing"))


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures():
    fn = AsyncMock(side_effect=[TransportError(StoreRegion.UK, "a"), UpstreamError(StoreRegion.UK, 503), ["ok"]])
    assert await with_retries(fn, attempts=2, delay_sec=0) == ["ok"]
    assert fn.await_count == 3


@pytest.mark.asyncio
async def test_gives_up_after_bounded_attempts():
    fn = AsyncMock(side_effect=TransportError(StoreRegion.UK, "down"))
    with pytest.raises(TransportError):
        await with_retries(fn, attempts=2, delay_sec=0)
    assert fn.await_count == 3


@pytest.mark.asyncio
async def test_non_retryable_raised_immediately():
    fn = AsyncMock(side_effect=ConfigError(StoreRegion.US, "missing"))
    with pytest.raises(ConfigError):
        await with_retries(fn, attempts=5, delay_sec=0)
    assert fn.await_count == 1

