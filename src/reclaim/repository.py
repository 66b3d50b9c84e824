"""Storage access used by the matching service.

The service only talks to the protocols below; the ``Sql*`` classes are
the SQLAlchemy implementations. Repositories flush but never commit: the
caller owns the transaction.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import Item, Notification, User
from .notifier.ranker import NotificationPreferences, preferences_for

logger = logging.getLogger(__name__)


class ItemRepository(Protocol):
    def get(self, item_id: int) -> Item | None: ...

    def add(self, item: Item) -> Item: ...

    def fetch_active_items(self, exclude_id: int | None = None) -> list[Item]: ...

    def fetch_all_items(self, exclude_id: int | None = None) -> list[Item]: ...

    def fetch_by_user(self, user_id: int) -> list[Item]: ...


class UserRepository(Protocol):
    def fetch_all_user_ids(self) -> list[int]: ...

    def fetch_admin_ids(self) -> list[int]: ...

    def fetch_preferences(self) -> dict[int, NotificationPreferences]: ...


class NotificationRepository(Protocol):
    def add_if_absent(self, notification: Notification) -> bool: ...

    def fetch_for_user(self, user_id: int) -> list[Notification]: ...


class SqlItemRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, item_id: int) -> Item | None:
        return self.db.get(Item, item_id)

    def add(self, item: Item) -> Item:
        self.db.add(item)
        self.db.flush()
        return item

    def fetch_active_items(self, exclude_id: int | None = None) -> list[Item]:
        q = self.db.query(Item).filter(Item.status == "active")
        if exclude_id is not None:
            q = q.filter(Item.id != exclude_id)
        return q.order_by(Item.created_at.asc(), Item.id.asc()).all()

    def fetch_all_items(self, exclude_id: int | None = None) -> list[Item]:
        q = self.db.query(Item)
        if exclude_id is not None:
            q = q.filter(Item.id != exclude_id)
        return q.order_by(Item.created_at.asc(), Item.id.asc()).all()

    def fetch_by_user(self, user_id: int) -> list[Item]:
        return (
            self.db.query(Item)
            .filter(Item.user_id == user_id)
            .order_by(Item.created_at.desc())
            .all()
        )


class SqlUserRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def fetch_all_user_ids(self) -> list[int]:
        return [row[0] for row in self.db.query(User.id).order_by(User.id).all()]

    def fetch_admin_ids(self) -> list[int]:
        return [
            row[0]
            for row in self.db.query(User.id).filter(User.is_admin == True).order_by(User.id).all()  # noqa: E712
        ]

    def fetch_preferences(self) -> dict[int, NotificationPreferences]:
        return {user.id: preferences_for(user) for user in self.db.query(User).all()}


class SqlNotificationRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def add_if_absent(self, notification: Notification) -> bool:
        """Insert unless (user_id, item_id) already exists.

        Returns False for a duplicate. The insert runs in a SAVEPOINT so a
        unique-constraint violation rolls back only this row. Other
        database errors propagate.
        """
        if notification.item_id is not None and self.exists(notification.user_id, notification.item_id):
            return False
        try:
            with self.db.begin_nested():
                self.db.add(notification)
                self.db.flush()
        except IntegrityError:
            logger.debug(
                "Notification for user %s / item %s already exists; skipped",
                notification.user_id, notification.item_id,
            )
            return False
        return True

    def exists(self, user_id: int, item_id: int) -> bool:
        return (
            self.db.query(Notification.id)
            .filter(Notification.user_id == user_id, Notification.item_id == item_id)
            .first()
        ) is not None

    def fetch_for_user(self, user_id: int) -> list[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .all()
        )
