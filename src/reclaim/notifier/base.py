"""Delivery channel interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..models import Notification


class BaseNotifier(ABC):
    """Abstract base for notification delivery channels."""

    @abstractmethod
    async def notify(self, notification: Notification) -> bool:
        """Deliver a stored notification. Return True on success."""
        ...

    def format_message(self, notification: Notification) -> str:
        lines = [f"[{notification.type}] {notification.item_name or notification.location}"]
        lines.append(f"Recipient: user {notification.user_id}")
        if notification.similarity_score is not None:
            lines.append(f"Similarity: {notification.similarity_score}%")
        lines.append(notification.message)
        return "\n".join(lines)
