"""Order, deduplicate and cap a batch of notifications before delivery.

``rank`` is the canonical pipeline: prioritize → deduplicate → cap.
Prioritizing first means the copy that survives deduplication is the
highest-priority one.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from ..matching import NOTIFY_MIN_SCORE, check_limit
from .builder import KIND_FOUND, KIND_LOCATION_RISK, KIND_LOST, KIND_MATCH

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _timestamp(value: datetime | None) -> float:
    if value is None:
        return _EPOCH.timestamp()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def _priority_key(notification) -> tuple:
    is_match = notification.type == KIND_MATCH
    score = (notification.similarity_score or 0) if is_match else 0
    return (
        0 if is_match else 1,
        -score,
        0 if notification.action_required else 1,
        -_timestamp(notification.created_at),
    )


def prioritize(notifications: list) -> list:
    """Sort: matches first (best score first), then action-required, then newest.

    The sort is stable, so fully tied notifications keep their input order.
    """
    return sorted(notifications, key=_priority_key)


def dedup_key(notification) -> tuple:
    target = notification.item_id if notification.item_id is not None else notification.location
    return (notification.user_id, notification.type, target)


def deduplicate(notifications: list) -> list:
    """Drop every notification whose (user, kind, item-or-location) key was already seen."""
    seen: set[tuple] = set()
    result = []
    for notification in notifications:
        key = dedup_key(notification)
        if key in seen:
            continue
        seen.add(key)
        result.append(notification)
    return result


def cap(notifications: list, max_daily: int) -> list:
    check_limit(max_daily, "max_daily")
    return notifications[:max_daily]


def rank(notifications: list, max_daily: int) -> list:
    return cap(deduplicate(prioritize(notifications)), max_daily)


def rank_per_recipient(
    notifications: list,
    max_daily: int,
    preferences: dict[int, NotificationPreferences] | None = None,
) -> list:
    """Apply ``rank`` to each recipient's notifications separately.

    When *preferences* has an entry for a recipient, their opt-outs are
    dropped after deduplication and their own daily limit applies on top
    of *max_daily*. Recipients appear in order of their first notification
    in the input.
    """
    check_limit(max_daily, "max_daily")
    preferences = preferences or {}
    by_user: dict[int, list] = {}
    for notification in notifications:
        by_user.setdefault(notification.user_id, []).append(notification)
    result = []
    for user_id, batch in by_user.items():
        prefs = preferences.get(user_id)
        if prefs is None:
            result.extend(rank(batch, max_daily))
            continue
        kept = filter_by_preference(deduplicate(prioritize(batch)), prefs)
        result.extend(cap(kept, max_daily))
    return result


# ---------------------------------------------------------------------------
# User preferences
# ---------------------------------------------------------------------------


@dataclass
class NotificationPreferences:
    minimum_similarity: int = NOTIFY_MIN_SCORE
    include_location_alerts: bool = True
    include_new_items: bool = True
    max_daily: int = 10


def preferences_for(user) -> NotificationPreferences:
    return NotificationPreferences(
        minimum_similarity=user.notify_min_similarity,
        include_location_alerts=user.notify_location_alerts,
        include_new_items=user.notify_new_items,
        max_daily=user.notify_max_daily,
    )


def filter_by_preference(
    notifications: list,
    preferences: NotificationPreferences | None = None,
) -> list:
    """Drop notifications the user opted out of, then cap to ``max_daily``."""
    prefs = preferences or NotificationPreferences()
    kept = []
    for notification in notifications:
        if notification.type == KIND_MATCH and \
                (notification.similarity_score or 0) < prefs.minimum_similarity:
            continue
        if notification.type == KIND_LOCATION_RISK and not prefs.include_location_alerts:
            continue
        if notification.type in (KIND_LOST, KIND_FOUND) and not prefs.include_new_items:
            continue
        kept.append(notification)
    return cap(kept, prefs.max_daily)
