"""Log-based notifier – writes notifications to the application log."""

from __future__ import annotations

import logging

from ..models import Notification
from .base import BaseNotifier

logger = logging.getLogger(__name__)


class LogNotifier(BaseNotifier):
    async def notify(self, notification: Notification) -> bool:
        msg = self.format_message(notification)
        logger.info("NOTIFICATION:\n%s", msg)
        return True
