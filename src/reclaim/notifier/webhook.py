"""Webhook notifier for Discord / Slack / generic JSON endpoints."""

from __future__ import annotations

import asyncio
import logging

import httpx

from ..config import settings
from ..models import Notification
from .base import BaseNotifier
from .builder import KIND_MATCH

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_BACKOFF = (1, 3, 5)  # seconds

STRONG_MATCH_COLOR = 0x2ECC71
DEFAULT_COLOR = 0x00BFFF


async def send_webhook(
    url: str,
    payload: dict,
    *,
    max_retries: int = MAX_RETRIES,
) -> bool:
    """POST a JSON payload to a webhook URL with retry + backoff."""
    for attempt in range(max_retries):
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                resp = await client.post(url, json=payload)
                resp.raise_for_status()
            return True
        except Exception as e:
            wait = RETRY_BACKOFF[attempt] if attempt < len(RETRY_BACKOFF) else RETRY_BACKOFF[-1]
            if attempt < max_retries - 1:
                logger.warning("Webhook attempt %d/%d failed: %s (retry in %ds)", attempt + 1, max_retries, e, wait)
                await asyncio.sleep(wait)
            else:
                logger.warning("Webhook failed after %d attempts: %s", max_retries, e)
    return False


class WebhookNotifier(BaseNotifier):
    def __init__(self, url: str | None = None, webhook_type: str | None = None) -> None:
        self.url = url or settings.webhook_url
        self.webhook_type = webhook_type or settings.webhook_type

    async def notify(self, notification: Notification) -> bool:
        if not self.url:
            logger.debug("Webhook URL not configured; skipping")
            return False

        msg = self.format_message(notification)
        payload = self._build_payload(msg, notification)
        return await send_webhook(self.url, payload)

    def _build_payload(self, message: str, notification: Notification) -> dict:
        if self.webhook_type == "discord":
            score = notification.similarity_score
            fields = [
                {"name": "Location", "value": notification.location or "-", "inline": True},
                {"name": "Date", "value": str(notification.date or "-"), "inline": True},
            ]
            if notification.type == KIND_MATCH and score is not None:
                fields.append({"name": "Match", "value": f"{score}%", "inline": True})
            return {
                "content": message,
                "embeds": [{
                    "title": notification.item_name or notification.type,
                    "color": STRONG_MATCH_COLOR if notification.action_required else DEFAULT_COLOR,
                    "fields": fields,
                }],
            }
        elif self.webhook_type == "slack":
            return {
                "text": message,
                "blocks": [{
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": message},
                }],
            }
        else:
            # Generic
            return {
                "message": message,
                "user_id": notification.user_id,
                "item_id": notification.item_id,
                "type": notification.type,
            }
