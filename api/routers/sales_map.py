"""
Sales map router

  GET /sales-map/orders   orders created since this endpoint's last poll
  GET /sales-map/markers  marker state built by the background consumer
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.schemas import MarkersResponse, SaleOut, SalesFeedResponse, _dt

router = APIRouter(prefix="/sales-map", tags=["sales-map"])
logger = logging.getLogger("orderwatch.api.sales_map")


@router.get("/orders", response_model=SalesFeedResponse)
async def get_new_orders(request: Request):
    cursor = request.app.state.sales_cursor
    try:
        events = await request.app.state.sales_feed.poll(cursor)
    except Exception as exc:
        # The map keeps polling; an empty batch plus the error is enough for it.
        logger.error("sales feed poll failed: %s", exc)
        return JSONResponse({"orders": [], "error": str(exc)})

    orders = [SaleOut.from_event(e) for e in events]
    return SalesFeedResponse(orders=orders, count=len(orders), last_check=_dt(cursor.last_check))


@router.get("/markers", response_model=MarkersResponse)
async def get_markers(request: Request) -> MarkersResponse:
    return MarkersResponse.from_state(request.app.state.sales_state)
