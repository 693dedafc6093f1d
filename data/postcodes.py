"""
HTTP client for postcodes.io — UK postcode → lat/lng/area.

Returns None on any lookup failure (unknown postcode, non-200, network
error) so the sales map simply skips the marker.
"""
from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from models.domain import GeoPoint

logger = logging.getLogger("orderwatch.data.postcodes")

_DEFAULT_BASE_URL = "https://api.postcodes.io"
_TIMEOUT = 10  # seconds


def normalize_postcode(postcode: str) -> str:
    """'sw1a 1aa ' → 'SW1A1AA'. Cache key and request path both use this form."""
    return "".join(postcode.split()).upper()


class PostcodesClient:
    def __init__(
        self,
        base_url: str = _DEFAULT_BASE_URL,
        timeout: float = _TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url  = base_url.rstrip("/")
        self._timeout   = timeout
        self._transport = transport

    async def lookup(self, postcode: str) -> Optional[GeoPoint]:
        clean = normalize_postcode(postcode)
        if not clean:
            return None
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.get(f"{self._base_url}/postcodes/{quote(clean)}")
        except httpx.RequestError as exc:
            logger.warning("postcodes.io lookup failed for %s (%s: %s)", clean, type(exc).__name__, exc)
            return None

        if resp.status_code != 200:
            logger.info("postcodes.io returned status %d for %s", resp.status_code, clean)
            return None

        try:
            result = resp.json().get("result") or {}
        except ValueError:
            logger.warning("postcodes.io returned a non-JSON body for %s", clean)
            return None
        lat, lng = result.get("latitude"), result.get("longitude")
        if lat is None or lng is None:
            return None
        return GeoPoint(
            lat=float(lat),
            lng=float(lng),
            area=result.get("admin_district") or result.get("region") or "UK",
        )
