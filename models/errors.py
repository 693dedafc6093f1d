"""
Error taxonomy for OrderWatch.

  ConfigError     — region credentials missing; fatal for that region only
  UpstreamError   — store backend answered with a non-success status
  TransportError  — store backend unreachable (DNS, connect, timeout)
  NotifierError   — alert delivery failed; recorded as sent=False for that track

Region-scoped errors carry the region so the check cycle can report them
as a per-region entry instead of aborting sibling regions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.domain import StoreRegion


class OrderWatchError(Exception):
    """Base class for all OrderWatch domain errors."""


class RegionError(OrderWatchError):
    """An error scoped to a single store region."""

    def __init__(self, region: "StoreRegion", detail: str) -> None:
        self.region = region
        self.detail = detail
        super().__init__(f"[{getattr(region, 'value', region)}] {detail}")


class ConfigError(RegionError):
    """Required per-region configuration is absent. Raised before any network call."""


class UpstreamError(RegionError):
    def __init__(self, region: "StoreRegion", status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        super().__init__(region, f"BigCommerce API error: {status_code} {detail[:300]}".rstrip())


class TransportError(RegionError):
    """Network-level failure talking to a store backend."""


class NotifierError(OrderWatchError):
    def __init__(self, detail: str, status_code: int | None = None) -> None:
        self.detail      = detail
        self.status_code = status_code
        super().__init__(detail)
