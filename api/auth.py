"""
Shared-secret gate for the dashboard API.

  POST /api/login  compares the dashboard password and sets a signed
                   session cookie (HS256 JWT, session_days expiry).
  /api/check       stays reachable for the external scheduler; a bearer
                   token mismatch against cron_secret is logged, not rejected.
  other /api/*     require a valid session cookie, else 401.
"""

from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Request
from fastapi.responses import JSONResponse

from config.settings import Settings

logger = logging.getLogger("orderwatch.auth")

SESSION_COOKIE = "orderwatch-auth"
PUBLIC_PATHS   = {"/api/check", "/api/login"}


def issue_session_token(config: Settings, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    claims = {
        "sub": "dashboard",
        "iat": now,
        "exp": now + timedelta(days=config.session_days),
    }
    return jwt.encode(claims, config.session_secret, algorithm=config.session_algorithm)


def verify_session_token(token: str, config: Settings) -> bool:
    try:
        jwt.decode(token, config.session_secret, algorithms=[config.session_algorithm])
    except jwt.InvalidTokenError:
        return False
    return True


def password_matches(candidate: str, config: Settings) -> bool:
    return hmac.compare_digest(candidate.encode(), config.dashboard_password.encode())


def cron_token_matches(request: Request, config: Settings) -> bool:
    """True when no cron secret is configured or the bearer header carries it."""
    if not config.cron_secret:
        return True
    header = request.headers.get("authorization", "")
    return hmac.compare_digest(header.encode(), f"Bearer {config.cron_secret}".encode())


async def session_gate(request: Request, call_next):
    """HTTP middleware: enforce the session cookie on non-public /api routes."""
    path = request.url.path
    if not path.startswith("/api/") or path in PUBLIC_PATHS:
        return await call_next(request)

    token = request.cookies.get(SESSION_COOKIE)
    if token and verify_session_token(token, request.app.state.config):
        return await call_next(request)

    return JSONResponse({"error": "Unauthorized"}, status_code=401)
