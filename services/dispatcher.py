"""
AlertDispatcher — decides, per store and per category, whether to notify.

Three independent tracks per cycle (overdue, incomplete, commented), each:

    Idle ──(category non-empty)──▶ Sent | Failed ──▶ Idle

  - empty category     → no send attempted, sent=False, no error
  - non-empty category → exactly one Notifier.send() with the full list
  - send raises        → sent=False for that track only; siblings still run
                         (NotifierError is logged as an error, anything
                         else with a traceback)

State resets every cycle. There is no cooldown: an order that is still
overdue next cycle is alerted again.
"""

from __future__ import annotations

import logging
from typing import Sequence

from models.domain import AlertCategory, ClassifiedView, EnrichedOrder, StoreCheckResult
from models.errors import NotifierError
from services.alert_templates import (
    render_comments_alert,
    render_incomplete_alert,
    render_overdue_alert,
)
from services.notifier import Notifier

logger = logging.getLogger("orderwatch.dispatcher")


class AlertDispatcher:
    def __init__(
        self,
        notifier: Notifier,
        alert_email: str,
        threshold_hours: int = 24,
        incomplete_threshold_minutes: int = 15,
    ) -> None:
        self.notifier = notifier
        self.alert_email = alert_email
        self.threshold_hours = threshold_hours
        self.incomplete_threshold_minutes = incomplete_threshold_minutes

    async def dispatch(self, view: ClassifiedView) -> StoreCheckResult:
        region = view.region

        overdue_sent = await self._run_track(
            view, AlertCategory.OVERDUE_UNSHIPPED, view.overdue,
            lambda: render_overdue_alert(region, view.overdue, self.threshold_hours),
        )
        incomplete_sent = await self._run_track(
            view, AlertCategory.STUCK_INCOMPLETE, view.incomplete_stuck,
            lambda: render_incomplete_alert(
                region, view.incomplete_stuck, self.incomplete_threshold_minutes,
            ),
        )
        commented_sent = await self._run_track(
            view, AlertCategory.HAS_COMMENT, view.commented,
            lambda: render_comments_alert(region, view.commented),
        )

        return StoreCheckResult(
            store=region,
            overdue_count=len(view.overdue),
            incomplete_count=len(view.incomplete_stuck),
            commented_count=len(view.commented),
            overdue_sent=overdue_sent,
            incomplete_sent=incomplete_sent,
            commented_sent=commented_sent,
        )

    async def _run_track(
        self,
        view: ClassifiedView,
        category: AlertCategory,
        orders: Sequence[EnrichedOrder],
        render,
    ) -> bool:
        if not orders:
            return False

        if not self.alert_email:
            logger.error(
                "alert email not configured — skipping %s alert for %s",
                category.value, view.region.value,
            )
            return False

        subject, html = render()
        try:
            sent = await self.notifier.send(self.alert_email, subject, html)
        except NotifierError as exc:
            logger.error(
                "alert send failed store=%s category=%s: %s",
                view.region.value, category.value, exc,
            )
            return False
        except Exception:
            logger.exception(
                "alert send crashed store=%s category=%s",
                view.region.value, category.value,
            )
            return False

        logger.info(
            "alert store=%s category=%s orders=%d sent=%s",
            view.region.value, category.value, len(orders), sent,
        )
        return bool(sent)
