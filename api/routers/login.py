"""
Login router — POST /login
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.auth import SESSION_COOKIE, issue_session_token, password_matches
from api.schemas import LoginRequest

router = APIRouter(tags=["auth"])


@router.post("/login")
async def login(body: LoginRequest, request: Request) -> JSONResponse:
    config = request.app.state.config
    if not password_matches(body.password, config):
        return JSONResponse({"success": False, "error": "Invalid password"}, status_code=401)

    response = JSONResponse({"success": True})
    response.set_cookie(
        SESSION_COOKIE,
        issue_session_token(config),
        max_age=60 * 60 * 24 * config.session_days,
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="lax",
    )
    return response
