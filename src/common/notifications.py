# ABOUTME: Publish/subscribe notifier for intervention alerts.
# ABOUTME: Instances are passed to callers explicitly; delivery channels subscribe as handlers.

from __future__ import annotations

import logging
from typing import Callable, List, Sequence

from .schemas import InterventionAlert

logger = logging.getLogger(__name__)

AlertHandler = Callable[[InterventionAlert], None]


class AlertNotifier:
    """
    Synchronous in-memory notifier.

    Handlers receive each published alert in subscription order. A failing
    handler is logged and skipped so the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: List[AlertHandler] = []

    def subscribe(self, handler: AlertHandler) -> None:
        self._handlers.append(handler)
        logger.debug("Subscribed alert handler %r", handler)

    def unsubscribe(self, handler: AlertHandler) -> bool:
        try:
            self._handlers.remove(handler)
        except ValueError:
            return False
        return True

    @property
    def handler_count(self) -> int:
        return len(self._handlers)

    def publish(self, alerts: Sequence[InterventionAlert]) -> int:
        """Deliver alerts to every handler; returns the number of successful deliveries."""
        delivered = 0
        for alert in alerts:
            for handler in list(self._handlers):
                try:
                    handler(alert)
                except Exception:
                    logger.exception("Alert handler %r failed for student %s", handler, alert.student_id)
                    continue
                delivered += 1
        if not self._handlers:
            logger.debug("No handlers subscribed; %d alerts dropped", len(alerts))
        return delivered
