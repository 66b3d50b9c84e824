"""Match a newly reported item against the corpus and fan out notifications.

Flow for one new item:
  1. score it against every other active item (opposite type only)
  2. build a match notification for the owner of each matched item
  3. add the "new item reported" broadcast for every user
  4. add location-risk alerts when the item's location loses more than it recovers
  5. add fraud alerts for admins when the reporter's behaviour needs review
  6. rank each recipient's batch (prioritize → deduplicate → cap)
  7. insert each notification, skipping (user, item) pairs that already exist

A failure for one recipient is logged and counted; it never aborts the rest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .analytics.fraud import analyze_behavior
from .analytics.hotspots import location_risk, location_stats
from .config import settings
from .matching import MAX_MATCHES, check_limit, check_threshold
from .matching.finder import MatchCandidate, find_matches
from .models import DeliveryLog, Item, Notification
from .notifier.base import BaseNotifier
from .notifier.builder import (
    KIND_FRAUD,
    KIND_MATCH,
    build_broadcast_notification,
    build_fraud_alert,
    build_location_alert,
    build_match_notification,
)
from .notifier.ranker import rank_per_recipient
from .repository import (
    ItemRepository,
    NotificationRepository,
    SqlItemRepository,
    SqlNotificationRepository,
    SqlUserRepository,
    UserRepository,
)

logger = logging.getLogger(__name__)

DELIVERED_KINDS = (KIND_MATCH, KIND_FRAUD)


@dataclass
class ProcessResult:
    matches: list[MatchCandidate] = field(default_factory=list)
    notifications: list[Notification] = field(default_factory=list)  # stored this run
    duplicates: int = 0
    failures: int = 0

    @property
    def notifications_created(self) -> int:
        return len(self.notifications)

    @property
    def match_notifications_created(self) -> int:
        return sum(1 for n in self.notifications if n.type == KIND_MATCH)


class MatchingService:
    def __init__(
        self,
        items: ItemRepository,
        users: UserRepository,
        notifications: NotificationRepository,
        *,
        match_threshold: int | None = None,
        notify_min_score: int | None = None,
        max_matches: int | None = None,
        max_daily: int | None = None,
        broadcast_enabled: bool | None = None,
        location_alerts_enabled: bool | None = None,
        location_risk_threshold: int | None = None,
        location_alert_min_reports: int | None = None,
    ) -> None:
        self.items = items
        self.users = users
        self.notifications = notifications

        self.match_threshold = _pick(match_threshold, settings.match_threshold)
        self.notify_min_score = _pick(notify_min_score, settings.notify_min_score)
        self.max_matches = _pick(max_matches, settings.max_matches)
        self.max_daily = _pick(max_daily, settings.max_daily_notifications)
        self.broadcast_enabled = _pick(broadcast_enabled, settings.broadcast_enabled)
        self.location_alerts_enabled = _pick(location_alerts_enabled, settings.location_alerts_enabled)
        self.location_risk_threshold = _pick(location_risk_threshold, settings.location_risk_threshold)
        self.location_alert_min_reports = _pick(
            location_alert_min_reports, settings.location_alert_min_reports,
        )

        check_threshold(self.match_threshold, "match_threshold")
        check_threshold(self.notify_min_score, "notify_min_score")
        check_threshold(self.location_risk_threshold, "location_risk_threshold")
        check_limit(self.max_matches, "max_matches", MAX_MATCHES)
        check_limit(self.max_daily, "max_daily")

    @classmethod
    def for_session(cls, db: Session, **kwargs) -> "MatchingService":
        return cls(
            SqlItemRepository(db), SqlUserRepository(db), SqlNotificationRepository(db), **kwargs,
        )

    def find_matches_for(self, item: Item) -> list[MatchCandidate]:
        corpus = self.items.fetch_active_items(exclude_id=item.id)
        return find_matches(item, corpus, threshold=self.match_threshold, limit=self.max_matches)

    def build_match_notifications(self, new_item: Item, matches: list[MatchCandidate]) -> tuple[list[Notification], int]:
        """One notification per match, addressed to the matched item's owner."""
        built: list[Notification] = []
        failures = 0
        for match in matches:
            other = match.item
            found_item, lost_item = (new_item, other) if new_item.type == "found" else (other, new_item)
            try:
                notification = build_match_notification(
                    other.user_id, found_item, lost_item, match.score,
                    min_score=self.notify_min_score,
                )
            except Exception as e:
                logger.warning("Failed to build match notification for user %s: %s", other.user_id, e)
                failures += 1
                continue
            if notification is not None:
                built.append(notification)
        return built, failures

    def process_new_item(self, new_item: Item) -> ProcessResult:
        logger.info("Processing new %s item #%s: %r", new_item.type, new_item.id, new_item.item_name)
        result = ProcessResult()

        result.matches = self.find_matches_for(new_item)
        logger.info("Found %d potential match(es) for item #%s", len(result.matches), new_item.id)

        drafts, result.failures = self.build_match_notifications(new_item, result.matches)

        user_ids: list[int] | None = None
        if self.broadcast_enabled:
            user_ids = self.users.fetch_all_user_ids()
            drafts.extend(build_broadcast_notification(uid, new_item) for uid in user_ids)

        corpus = self.items.fetch_all_items()

        if self.location_alerts_enabled and new_item.location:
            reports = location_stats(new_item.location, corpus).total_reports
            risk = location_risk(new_item.location, corpus)
            if reports >= self.location_alert_min_reports and risk > self.location_risk_threshold:
                logger.info("Location %r is high-risk (%d%% lost)", new_item.location, risk)
                if user_ids is None:
                    user_ids = self.users.fetch_all_user_ids()
                drafts.extend(build_location_alert(uid, new_item.location, risk) for uid in user_ids)

        trust = analyze_behavior(
            new_item.user_id, corpus, self.notifications.fetch_for_user(new_item.user_id),
        )
        if trust.needs_review:
            logger.warning(
                "User %s flagged (%s risk, %d flag(s))",
                new_item.user_id, trust.risk_level, len(trust.flags),
            )
            drafts.extend(build_fraud_alert(aid, trust) for aid in self.users.fetch_admin_ids())

        preferences = self.users.fetch_preferences()
        for notification in rank_per_recipient(drafts, self.max_daily, preferences):
            try:
                stored = self.notifications.add_if_absent(notification)
            except SQLAlchemyError as e:
                logger.warning(
                    "Failed to store %s notification for user %s: %s",
                    notification.type, notification.user_id, e,
                )
                result.failures += 1
                continue
            if stored:
                result.notifications.append(notification)
            else:
                result.duplicates += 1

        logger.info(
            "Item #%s: %d notification(s) created (%d from matches), %d duplicate(s), %d failure(s)",
            new_item.id, result.notifications_created, result.match_notifications_created,
            result.duplicates, result.failures,
        )
        return result


def _pick(value, default):
    return default if value is None else value


async def deliver_notifications(
    notifications: list[Notification],
    notifiers: list[BaseNotifier],
    db: Session,
    kinds: tuple[str, ...] = DELIVERED_KINDS,
) -> int:
    """Push stored notifications of *kinds* through every notifier; returns successful sends.

    Each attempt is recorded in DeliveryLog. The caller commits.
    """
    sent = 0
    for notification in notifications:
        if notification.type not in kinds:
            continue
        for notifier in notifiers:
            channel = type(notifier).__name__
            try:
                success = await notifier.notify(notification)
                db.add(DeliveryLog(
                    notification_id=notification.id,
                    channel=channel,
                    success=success,
                    message=notifier.format_message(notification),
                ))
                if success:
                    sent += 1
            except Exception as e:
                logger.warning("Notifier %s failed: %s", channel, e)
                db.add(DeliveryLog(
                    notification_id=notification.id,
                    channel=channel,
                    success=False,
                    message=str(e),
                ))
    return sent
