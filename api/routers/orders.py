"""
Orders router — GET /orders?store=uk|us

Full classified view for one store, without sending any alerts.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from api.schemas import OrdersResponse
from models.domain import StoreRegion

router = APIRouter(tags=["orders"])
logger = logging.getLogger("orderwatch.api.orders")


@router.get("/orders", response_model=OrdersResponse)
async def get_orders(request: Request, store: str = Query("uk")):
    try:
        region = StoreRegion(store)
    except ValueError:
        return JSONResponse({"error": "Invalid store parameter"}, status_code=400)

    config = request.app.state.config
    try:
        view = await request.app.state.query_service.query(region)
    except Exception as exc:
        logger.error("error fetching orders (%s): %s", region.value, exc)
        return JSONResponse(
            {"error": "Failed to fetch orders", "details": str(exc)},
            status_code=500,
        )

    return OrdersResponse.from_view(
        view, config.threshold_hours, config.incomplete_threshold_minutes,
    )
