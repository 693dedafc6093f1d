"""
Tests for Settings — env-prefixed config and per-region credentials.
"""

from __future__ import annotations

import pytest

from config.settings import Settings
from models.domain import StoreRegion
from models.errors import ConfigError


def test_defaults_without_env():
    config = Settings(_env_file=None)
    assert config.threshold_hours == 24
    assert config.incomplete_threshold_minutes == 15
    assert config.check_interval_hours == 3
    assert config.sales_map_region is StoreRegion.UK


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("ORDERWATCH_THRESHOLD_HOURS", "48")
    monkeypatch.setenv("ORDERWATCH_US_STORE_HASH", "ushash")
    monkeypatch.setenv("ORDERWATCH_US_ACCESS_TOKEN", "secret")
    config = Settings(_env_file=None)

    assert config.threshold_hours == 48
    creds = config.credentials_for(StoreRegion.US)
    assert (creds.store_hash, creds.access_token) == ("ushash", "secret")


@pytest.mark.parametrize("store_hash,token", [("", "t"), ("h", ""), ("  ", "  ")])
def test_partial_credentials_raise_config_error(store_hash, token):
    config = Settings(_env_file=None, uk_store_hash=store_hash, uk_access_token=token)
    with pytest.raises(ConfigError) as excinfo:
        config.credentials_for(StoreRegion.UK)
    assert excinfo.value.region is StoreRegion.UK
    assert "not configured" in str(excinfo.value)
