"""
FastAPI application factory for the OrderWatch dashboard API.

Usage:
    uvicorn api.app:app --reload --port 3000   # API only, no scheduler
    python run.py                               # API + scheduled check cycle + sales map
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.auth import session_gate
from api.routers import check, login, orders, sales_map
from config.settings import Settings, settings as default_settings
from services.sales_map import SalesFeedCursor, SalesMapState


def create_app(
    monitor,
    query_service,
    sales_feed,
    sales_state: SalesMapState | None = None,
    config: Settings | None = None,
    lifespan=None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    All service instances are stored on app.state so routers can retrieve
    them via request.app.state.<name>.
    """
    app = FastAPI(
        title="OrderWatch Dashboard API",
        version="1.0",
        lifespan=lifespan,
    )

    # Inject service instances
    app.state.config        = config or default_settings
    app.state.monitor       = monitor
    app.state.query_service = query_service
    app.state.sales_feed    = sales_feed
    app.state.sales_cursor  = SalesFeedCursor()
    app.state.sales_state   = sales_state or SalesMapState()

    app.middleware("http")(session_gate)

    # CORS: lock down in production
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    PREFIX = "/api"
    app.include_router(check.router,     prefix=PREFIX)
    app.include_router(orders.router,    prefix=PREFIX)
    app.include_router(sales_map.router, prefix=PREFIX)
    app.include_router(login.router,     prefix=PREFIX)

    return app


# ── Module-level app for `uvicorn api.app:app` ────────────────────────────────

def _make_default_app() -> FastAPI:
    from services.factory import build_services

    monitor, query_service, sales_feed, _ = build_services()
    return create_app(monitor, query_service, sales_feed)


app = _make_default_app()
