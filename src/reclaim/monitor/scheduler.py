"""APScheduler jobs: hotspot refresh and notification retention."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..analytics.hotspots import HotspotReport, analyze_hotspots
from ..config import settings
from ..database import SessionLocal
from ..models import DeliveryLog, Item, Notification
from ..notifier.builder import KIND_HOTSPOT, build_hotspot_notification
from ..repository import SqlNotificationRepository, SqlUserRepository

logger = logging.getLogger(__name__)

RETENTION_INTERVAL = 86400  # seconds


class HotspotMonitor:
    """Keeps a cached HotspotReport fresh and warns users about new hotspots.

    A location is announced once: locations that already have a hotspot
    notification in the database are not announced again.
    """

    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        refresh_interval: int | None = None,
        retention_days: int | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.refresh_interval = refresh_interval or settings.hotspot_refresh_interval
        self.retention_days = retention_days or settings.notification_retention_days
        self.last_report: HotspotReport | None = None
        self.last_refreshed_at: datetime | None = None
        self._scheduler = AsyncIOScheduler()
        self.running = False

    def start(self) -> None:
        self._scheduler.add_job(
            self.refresh,
            "interval",
            seconds=self.refresh_interval,
            id="hotspot_refresh",
            replace_existing=True,
            max_instances=1,
            next_run_time=datetime.now(timezone.utc),
        )
        self._scheduler.add_job(
            self.cleanup_notifications,
            "interval",
            seconds=RETENTION_INTERVAL,
            id="notification_retention",
            replace_existing=True,
            max_instances=1,
        )
        self._scheduler.start()
        self.running = True
        logger.info("Hotspot monitor started (interval=%ds)", self.refresh_interval)

    def pause(self) -> None:
        self._scheduler.pause()
        self.running = False
        logger.info("Hotspot monitor paused")

    def resume(self) -> None:
        self._scheduler.resume()
        self.running = True
        logger.info("Hotspot monitor resumed")

    def shutdown(self) -> None:
        self._scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Hotspot monitor shut down")

    async def refresh(self) -> int:
        """Recompute the hotspot report; returns the number of alerts stored."""
        db: Session = self.session_factory()
        try:
            report = analyze_hotspots(db.query(Item).all())
            self.last_report = report
            self.last_refreshed_at = datetime.now(timezone.utc)

            announced = {
                row[0]
                for row in db.query(Notification.location)
                .filter(Notification.type == KIND_HOTSPOT)
                .distinct()
                .all()
            }
            fresh = [s for s in report.high_risk if s.location not in announced]
            if not fresh:
                logger.debug("Hotspot refresh: %d location(s), nothing new", len(report.per_location))
                return 0

            user_ids = SqlUserRepository(db).fetch_all_user_ids()
            notifications = SqlNotificationRepository(db)
            stored = 0
            for stat in fresh:
                for user_id in user_ids:
                    notification = build_hotspot_notification(user_id, stat)
                    if notification is None:
                        continue
                    try:
                        if notifications.add_if_absent(notification):
                            stored += 1
                    except SQLAlchemyError as e:
                        logger.warning(
                            "Failed to store hotspot alert for user %s at %r: %s",
                            user_id, stat.location, e,
                        )
            db.commit()
            logger.info(
                "Hotspot refresh: %d new hotspot(s), %d alert(s) stored",
                len(fresh), stored,
            )
            return stored
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Hotspot refresh failed: %s", e)
            return 0
        finally:
            db.close()

    async def cleanup_notifications(self) -> int:
        """Delete read notifications older than the retention window."""
        db: Session = self.session_factory()
        try:
            cutoff = datetime.now(timezone.utc) - timedelta(days=self.retention_days)
            stale = (
                Notification.read_status == True,  # noqa: E712
                Notification.created_at < cutoff,
            )
            db.query(DeliveryLog).filter(
                DeliveryLog.notification_id.in_(select(Notification.id).where(*stale)),
            ).delete(synchronize_session=False)
            count = db.query(Notification).filter(*stale).delete(synchronize_session=False)
            db.commit()
            if count:
                logger.info("Data retention: deleted %d old notification(s)", count)
            return count
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Data retention cleanup failed: %s", e)
            return 0
        finally:
            db.close()
