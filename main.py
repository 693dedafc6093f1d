"""
OrderWatch — headless scheduler entrypoint.

Runs the order check cycle every ORDERWATCH_CHECK_INTERVAL_HOURS (default 3)
and the live sales-map consumer every ORDERWATCH_SALES_MAP_POLL_SEC, with
no HTTP surface. Use run.py for API + scheduler in one process.

Usage:
    python main.py
    ORDERWATCH_CHECK_INTERVAL_HOURS=1 python main.py
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

import structlog

# ── Logging setup ─────────────────────────────────────────────────────────────

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

log = structlog.get_logger("orderwatch.main")


# ── Main ──────────────────────────────────────────────────────────────────────

async def main() -> None:
    from services.factory import build_services
    from config.settings import settings
    from services.sales_map import SalesMapState
    from services.scheduler import build_scheduler, run_check_job

    log.info("orderwatch starting")

    monitor, _, _, consumer = build_services(settings)
    state = SalesMapState()

    scheduler = build_scheduler(monitor, consumer, state, settings)
    scheduler.start()
    log.info(
        "scheduler started",
        check_every_hours=settings.check_interval_hours,
        sales_map_every_sec=settings.sales_map_poll_sec,
    )

    # First cycle immediately rather than waiting a full interval
    await run_check_job(monitor, settings.check_retry_attempts, settings.check_retry_delay_sec)

    # ── Run until interrupted ─────────────────────────────────────────────────
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _handle_signal():
        log.info("shutdown signal received")
        stop_event.set()

    for sig_name in ("SIGINT", "SIGTERM"):
        sig = getattr(signal, sig_name, None)
        if sig is not None:
            loop.add_signal_handler(sig, _handle_signal)

    try:
        await stop_event.wait()
    except (KeyboardInterrupt, SystemExit):
        pass
    finally:
        log.info("shutting down")
        scheduler.shutdown(wait=False)
        log.info("orderwatch stopped")


if __name__ == "__main__":
    asyncio.run(main())
