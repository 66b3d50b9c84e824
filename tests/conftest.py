"""Test fixtures: in-memory DB and item/user factories."""

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from reclaim.database import Base, make_engine
from reclaim.models import Item, User


@pytest.fixture()
def engine():
    engine = make_engine("sqlite:///:memory:", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def make_user(db):
    counter = iter(range(1, 10_000))

    def _make(name: str = "", is_admin: bool = False, **kw) -> User:
        n = next(counter)
        user = User(
            email=kw.pop("email", f"user{n}@example.com"),
            name=name or f"User {n}",
            is_admin=is_admin,
            registered_at=kw.pop("registered_at", datetime.now(timezone.utc) - timedelta(days=30)),
            **kw,
        )
        db.add(user)
        db.flush()
        return user

    return _make


@pytest.fixture()
def make_item(db):
    def _make(user: User, type: str = "lost", **kw) -> Item:
        item = Item(
            type=type,
            category=kw.pop("category", "Electronics"),
            item_name=kw.pop("item_name", "iPhone 13"),
            description=kw.pop("description", ""),
            location=kw.pop("location", "Central Library"),
            date=kw.pop("date", date(2026, 1, 10)),
            contact_info=kw.pop("contact_info", "owner@example.com"),
            user_id=user.id,
            status=kw.pop("status", "active"),
            **kw,
        )
        db.add(item)
        db.flush()
        return item

    return _make


def report(**kw) -> SimpleNamespace:
    """Plain-object item for tests that don't need the database."""
    fields = {
        "id": None,
        "type": "lost",
        "category": "",
        "item_name": "",
        "description": "",
        "location": "",
        "date": None,
        "contact_info": "",
        "user_id": 1,
        "status": "active",
        "created_at": None,
    }
    fields.update(kw)
    return SimpleNamespace(**fields)


LOST_IPHONE = dict(
    type="lost",
    item_name="iPhone 13 Pro",
    category="Electronics",
    location="Central Library, 2nd Floor",
    date=date(2026, 1, 10),
    description="Space Gray iPhone with a blue case",
)

FOUND_IPHONE = dict(
    type="found",
    item_name="iPhone 13",
    category="Electronics",
    location="Central Library",
    date=date(2026, 1, 11),
    description="blue phone case found",
)
