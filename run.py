"""
OrderWatch — Combined Runner.

Starts the FastAPI dashboard API and the scheduler in ONE process so the
sales-map consumer state served by /api/sales-map/markers is the same
object the background job updates.

Usage:
    python run.py
    PORT=3001 python run.py      # override port (default 3000)

What runs:
  - FastAPI dashboard API        → http://localhost:3000
  - Order check cycle            → every ORDERWATCH_CHECK_INTERVAL_HOURS
  - Sales map consumer           → every ORDERWATCH_SALES_MAP_POLL_SEC
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys

import structlog
import uvicorn

# ── Logging setup ──────────────────────────────────────────────────────────────
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    stream=sys.stdout,
)

log = structlog.get_logger("orderwatch.run")


async def main() -> None:
    log.info("orderwatch combined runner starting")

    from api.app import create_app
    from config.settings import settings
    from services.factory import build_services
    from services.sales_map import SalesMapState
    from services.scheduler import build_scheduler

    monitor, query_service, sales_feed, consumer = build_services(settings)
    state = SalesMapState()

    app = create_app(monitor, query_service, sales_feed, sales_state=state, config=settings)

    # ── Scheduler ─────────────────────────────────────────────────────────────
    scheduler = build_scheduler(monitor, consumer, state, settings)
    scheduler.start()
    log.info(
        "scheduler started",
        check_every_hours=settings.check_interval_hours,
        sales_map_every_sec=settings.sales_map_poll_sec,
    )

    # ── Start uvicorn in the same event loop ───────────────────────────────────
    port = int(os.environ.get("PORT", 3000))
    config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=port,
        log_level="info",
        # Reuse the running event loop
        loop="none",
    )
    server = uvicorn.Server(config)
    log.info("combined server starting", port=port)

    try:
        await server.serve()
    finally:
        scheduler.shutdown(wait=False)
        log.info("orderwatch combined runner stopped")


if __name__ == "__main__":
    asyncio.run(main())
