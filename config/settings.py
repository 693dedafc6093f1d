"""
Global configuration for OrderWatch.

All values are read from environment variables (prefixed ORDERWATCH_).
Defaults are safe for local development; override in production via .env or secrets manager.

Store credentials are optional at the process level: a region without a
store hash + access token fails its own operations with ConfigError, while
the other region keeps working.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict

from models.domain import StoreRegion
from models.errors import ConfigError


@dataclass(frozen=True)
class StoreCredentials:
    region:       StoreRegion
    store_hash:   str
    access_token: str


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ORDERWATCH_", env_file=".env")

    # ── BigCommerce stores ────────────────────────────────────────────────
    uk_store_hash: str = ""
    uk_access_token: str = ""
    us_store_hash: str = ""
    us_access_token: str = ""
    api_base_url: str = "https://api.bigcommerce.com/stores"
    http_timeout_sec: float = 30.0

    # ── Alert thresholds ──────────────────────────────────────────────────
    threshold_hours: int = 24                     # awaiting-shipment age that counts as overdue
    incomplete_threshold_minutes: int = 15        # abandoned checkout age that counts as stuck
    recent_orders_limit: int = 20                 # "most recent N" shown to operators
    awaiting_orders_limit: int = 250              # BigCommerce v2 max page size

    # ── Alerting (Resend) ─────────────────────────────────────────────────
    alert_email: str = ""
    resend_api_key: str = ""
    resend_from: str = "GTSE Orders <onboarding@resend.dev>"
    resend_base_url: str = "https://api.resend.com"

    # ── Auth ──────────────────────────────────────────────────────────────
    cron_secret: str = ""
    dashboard_password: str = "gtse2026"
    session_secret: str = "change-me-in-production"
    session_algorithm: str = "HS256"
    session_days: int = 7

    # ── Scheduler ─────────────────────────────────────────────────────────
    check_interval_hours: int = 3
    check_retry_attempts: int = 2                 # extra attempts after the first failure
    check_retry_delay_sec: float = 30.0

    # ── Live sales map ────────────────────────────────────────────────────
    sales_map_region: StoreRegion = StoreRegion.UK
    sales_map_poll_sec: int = 30
    sales_feed_limit: int = 50
    postcodes_base_url: str = "https://api.postcodes.io"

    def credentials_for(self, region: StoreRegion) -> StoreCredentials:
        """Return the credential pair for a region, or raise ConfigError if either half is blank."""
        region = StoreRegion(region)
        store_hash = getattr(self, f"{region.value}_store_hash").strip()
        token = getattr(self, f"{region.value}_access_token").strip()
        if not store_hash or not token:
            raise ConfigError(region, "BigCommerce credentials not configured")
        return StoreCredentials(region=region, store_hash=store_hash, access_token=token)

    def store_hash_for(self, region: StoreRegion) -> str:
        return getattr(self, f"{StoreRegion(region).value}_store_hash").strip()


settings = Settings()
