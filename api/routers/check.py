"""
Check router — GET /check

Invoked by the external scheduler (cron). Runs one check cycle across all
regions and reports per-region outcomes. Never leaves the caller without
a JSON answer: a crash inside the cycle becomes a 500 with details.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.auth import cron_token_matches

router = APIRouter(tags=["check"])
logger = logging.getLogger("orderwatch.api.check")


@router.get("/check")
async def run_check(request: Request) -> JSONResponse:
    if not cron_token_matches(request, request.app.state.config):
        logger.warning("check endpoint called without a matching cron bearer token")

    try:
        cycle = await request.app.state.monitor.run_check()
    except Exception as exc:
        logger.exception("check cycle failed")
        return JSONResponse(
            {"error": "Failed to check orders", "details": str(exc)},
            status_code=500,
        )

    return JSONResponse(cycle.to_payload())
