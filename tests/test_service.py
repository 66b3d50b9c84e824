"""Tests for the new-item matching and notification fan-out."""

from datetime import date
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from conftest import FOUND_IPHONE, LOST_IPHONE, report
from reclaim.matching import MatchingConfigError
from reclaim.models import DeliveryLog, Notification
from reclaim.notifier.builder import (
    KIND_FOUND,
    KIND_FRAUD,
    KIND_LOCATION_RISK,
    KIND_LOST,
    KIND_MATCH,
)
from reclaim.notifier.log_notifier import LogNotifier
from reclaim.notifier.ranker import NotificationPreferences
from reclaim.service import MatchingService, deliver_notifications


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


class FakeItems:
    def __init__(self, items):
        self.items = list(items)

    def get(self, item_id):
        return next((i for i in self.items if i.id == item_id), None)

    def add(self, item):
        self.items.append(item)
        return item

    def fetch_active_items(self, exclude_id=None):
        return [i for i in self.items if i.status == "active" and i.id != exclude_id]

    def fetch_all_items(self, exclude_id=None):
        return [i for i in self.items if i.id != exclude_id]

    def fetch_by_user(self, user_id):
        return [i for i in self.items if i.user_id == user_id]


class FakeUsers:
    def __init__(self, user_ids, admin_ids=(), preferences=None):
        self.user_ids = list(user_ids)
        self.admin_ids = list(admin_ids)
        self.preferences = dict(preferences or {})

    def fetch_all_user_ids(self):
        return list(self.user_ids)

    def fetch_admin_ids(self):
        return list(self.admin_ids)

    def fetch_preferences(self):
        return dict(self.preferences)


class FakeNotifications:
    def __init__(self, failing_users=()):
        self.stored = []
        self.failing_users = set(failing_users)

    def add_if_absent(self, notification):
        if notification.user_id in self.failing_users:
            raise OperationalError("INSERT", {}, Exception("database is locked"))
        key = (notification.user_id, notification.item_id)
        if notification.item_id is not None and any(
            (n.user_id, n.item_id) == key for n in self.stored
        ):
            return False
        self.stored.append(notification)
        return True

    def fetch_for_user(self, user_id):
        return [n for n in self.stored if n.user_id == user_id]


def _service(items, user_ids, admin_ids=(), failing_users=(), preferences=None, **kw):
    notifications = FakeNotifications(failing_users)
    users = FakeUsers(user_ids, admin_ids, preferences)
    service = MatchingService(FakeItems(items), users, notifications, **kw)
    return service, notifications


# ---------------------------------------------------------------------------
# Fan-out with in-memory repositories
# ---------------------------------------------------------------------------


class TestProcessNewItem:
    def test_match_notifies_lost_owner(self):
        lost = report(id=1, user_id=10, contact_info="x", **LOST_IPHONE)
        found = report(id=2, user_id=20, contact_info="x", **FOUND_IPHONE)
        service, store = _service([lost, found], [10, 20], broadcast_enabled=False)

        result = service.process_new_item(found)

        assert [(m.item.id, m.score) for m in result.matches] == [(1, 76)]
        assert result.match_notifications_created == 1
        match = store.stored[0]
        assert match.type == KIND_MATCH
        assert match.user_id == 10
        assert match.item_id == 2
        assert match.similarity_score == 76

    def test_match_wins_over_broadcast_for_same_item(self):
        lost = report(id=1, user_id=10, contact_info="x", **LOST_IPHONE)
        found = report(id=2, user_id=20, contact_info="x", **FOUND_IPHONE)
        service, store = _service([lost, found], [10, 20])

        result = service.process_new_item(found)

        kinds = {(n.user_id, n.type) for n in store.stored}
        assert kinds == {(10, KIND_MATCH), (20, KIND_FOUND)}
        assert result.duplicates == 1
        assert result.notifications_created == 2

    def test_no_match_below_threshold(self):
        lost = report(id=1, user_id=10, contact_info="x", **LOST_IPHONE)
        found = report(id=2, user_id=20, contact_info="x", **dict(FOUND_IPHONE, date=date(2025, 3, 1)))
        service, _ = _service([lost, found], [10, 20], match_threshold=90, broadcast_enabled=False)
        assert service.process_new_item(found).matches == []

    def test_notify_floor_separate_from_threshold(self):
        lost = report(id=1, user_id=10, contact_info="x", **LOST_IPHONE)
        found = report(id=2, user_id=20, contact_info="x", **FOUND_IPHONE)
        service, store = _service(
            [lost, found], [10, 20], match_threshold=50, notify_min_score=80, broadcast_enabled=False,
        )
        result = service.process_new_item(found)
        assert len(result.matches) == 1
        assert store.stored == []

    def test_failure_does_not_abort_fanout(self):
        found = report(id=2, user_id=20, contact_info="x", **FOUND_IPHONE)
        service, store = _service([found], [10, 20, 30], failing_users=[20])

        result = service.process_new_item(found)

        assert result.failures == 1
        assert sorted(n.user_id for n in store.stored) == [10, 30]
        assert all(n.type == KIND_FOUND for n in store.stored)

    def test_daily_cap_keeps_highest_priority(self):
        lost = report(id=1, user_id=10, contact_info="x", **LOST_IPHONE)
        found = report(id=2, user_id=20, contact_info="x", **FOUND_IPHONE)
        service, store = _service([lost, found], [10, 20], max_daily=1)

        result = service.process_new_item(found)

        assert [n.type for n in store.stored if n.user_id == 10] == [KIND_MATCH]
        assert [n.type for n in store.stored if n.user_id == 20] == [KIND_FOUND]
        assert result.duplicates == 0

    def test_user_preferences_respected(self):
        lost = report(id=1, user_id=10, contact_info="x", **LOST_IPHONE)
        found = report(id=2, user_id=20, contact_info="x", **FOUND_IPHONE)
        preferences = {
            10: NotificationPreferences(minimum_similarity=90),
            30: NotificationPreferences(include_new_items=False),
        }
        service, store = _service([lost, found], [10, 20, 30], preferences=preferences)

        result = service.process_new_item(found)

        assert len(result.matches) == 1
        assert sorted((n.user_id, n.type) for n in store.stored) == [(10, KIND_FOUND), (20, KIND_FOUND)]

    def test_location_alert(self):
        existing = [
            report(id=n, user_id=30 + n, type="lost", location="Gym", contact_info="x") for n in range(1, 4)
        ]
        new = report(id=9, user_id=40, type="lost", location="Gym", item_name="Cap", contact_info="x")
        service, store = _service(existing + [new], [31, 40], broadcast_enabled=False)

        service.process_new_item(new)

        alerts = [n for n in store.stored if n.type == KIND_LOCATION_RISK]
        assert sorted(n.user_id for n in alerts) == [31, 40]
        assert "Loss Risk: 100%" in alerts[0].message

    def test_no_location_alert_for_first_report(self):
        new = report(id=9, user_id=40, type="lost", location="Gym", contact_info="x")
        service, store = _service([new], [40], broadcast_enabled=False)
        service.process_new_item(new)
        assert store.stored == []

    def test_fraud_alert_to_admins(self):
        lost = report(id=1, user_id=10, type="lost", location="Gym", contact_info="x")
        found = report(id=2, user_id=10, type="found", location="Gym", item_name="Keys", contact_info="x")
        service, store = _service(
            [lost, found], [10, 99], admin_ids=[99],
            broadcast_enabled=False, location_alerts_enabled=False,
        )
        service.process_new_item(found)
        alerts = [n for n in store.stored if n.type == KIND_FRAUD]
        assert [n.user_id for n in alerts] == [99]

    def test_bad_configuration_rejected(self):
        with pytest.raises(MatchingConfigError):
            _service([], [], match_threshold=120)
        with pytest.raises(MatchingConfigError):
            _service([], [], max_daily=-1)
        with pytest.raises(MatchingConfigError):
            _service([], [], max_matches=10)


# ---------------------------------------------------------------------------
# Against the database
# ---------------------------------------------------------------------------


class TestWithDatabase:
    def test_iphone_scenario(self, db, make_user, make_item):
        alice, bob = make_user("Alice"), make_user("Bob")
        lost = make_item(alice, **LOST_IPHONE)
        found = make_item(bob, **FOUND_IPHONE)

        result = MatchingService.for_session(db).process_new_item(found)
        db.commit()

        assert result.match_notifications_created == 1
        rows = db.query(Notification).filter_by(user_id=alice.id).all()
        assert [(n.type, n.item_id) for n in rows] == [(KIND_MATCH, found.id)]
        assert lost.id not in [n.item_id for n in rows]

    def test_reprocessing_is_idempotent(self, db, make_user, make_item):
        alice, bob = make_user(), make_user()
        make_item(alice, **LOST_IPHONE)
        found = make_item(bob, **FOUND_IPHONE)
        service = MatchingService.for_session(db)

        first = service.process_new_item(found)
        second = service.process_new_item(found)
        db.commit()

        assert first.notifications_created == 2
        assert second.notifications_created == 0
        assert second.duplicates == 3
        assert db.query(Notification).count() == 2


class TestDeliver:
    @pytest.mark.asyncio
    async def test_delivers_matches_only(self, db, make_user):
        user = make_user()
        match = Notification(user_id=user.id, type=KIND_MATCH, message="m", similarity_score=80)
        broadcast = Notification(user_id=user.id, type=KIND_LOST, message="b")
        db.add_all([match, broadcast])
        db.flush()

        failing = AsyncMock()
        failing.notify = AsyncMock(side_effect=RuntimeError("boom"))
        failing.format_message = lambda n: n.message

        sent = await deliver_notifications([match, broadcast], [LogNotifier(), failing], db)
        db.commit()

        assert sent == 1
        logs = db.query(DeliveryLog).order_by(DeliveryLog.id).all()
        assert [(log.channel, log.success) for log in logs] == [("LogNotifier", True), ("AsyncMock", False)]
        assert logs[1].message == "boom"
