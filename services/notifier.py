"""
Notifier capability — send(to, subject, html) -> bool.

ResendNotifier   delivers through the Resend REST API (POST /emails)
InMemoryNotifier records every send; used by tests and local dev runs

Delivery failure raises NotifierError. The dispatcher turns that into
sent=False for the one track concerned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from models.errors import NotifierError

logger = logging.getLogger("orderwatch.notifier")


class Notifier(Protocol):
    async def send(self, to: str, subject: str, html: str) -> bool: ...


# ── Resend ────────────────────────────────────────────────────────────────────

class ResendNotifier:
    def __init__(
        self,
        api_key: str,
        sender: str,
        base_url: str = "https://api.resend.com",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key   = api_key
        self._sender    = sender
        self._base_url  = base_url.rstrip("/")
        self._timeout   = timeout
        self._transport = transport

    async def send(self, to: str, subject: str, html: str) -> bool:
        if not self._api_key:
            raise NotifierError("RESEND api key not configured")

        body = {"from": self._sender, "to": [to], "subject": subject, "html": html}
        headers = {"Authorization": f"Bearer {self._api_key}"}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(f"{self._base_url}/emails", json=body, headers=headers)
        except httpx.RequestError as exc:
            raise NotifierError(f"resend unreachable: {type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise NotifierError(
                f"resend rejected email: {response.text[:300]}",
                status_code=response.status_code,
            )

        logger.info("alert email sent to=%s subject=%r", to, subject)
        return True


# ── In-memory ─────────────────────────────────────────────────────────────────

@dataclass
class SentEmail:
    to: str
    subject: str
    html: str


@dataclass
class InMemoryNotifier:
    """Records sends. `fail_subjects` makes any subject containing one of the strings fail."""
    sent: list[SentEmail] = field(default_factory=list)
    fail_subjects: list[str] = field(default_factory=list)

    async def send(self, to: str, subject: str, html: str) -> bool:
        if any(marker in subject for marker in self.fail_subjects):
            raise NotifierError(f"simulated delivery failure for {subject!r}")
        self.sent.append(SentEmail(to=to, subject=subject, html=html))
        return True
