from datetime import date as date_, datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

from sqlalchemy import (
    Boolean, Date, DateTime, ForeignKey, Integer, LargeBinary, Text, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base

ITEM_TYPES = ("lost", "found")
ITEM_STATUSES = ("active", "resolved")


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(Text, unique=True, index=True)
    name: Mapped[str] = mapped_column(Text, default="")
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    registered_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    # Notification preferences
    notify_min_similarity: Mapped[int] = mapped_column(Integer, default=60)
    notify_location_alerts: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_new_items: Mapped[bool] = mapped_column(Boolean, default=True)
    notify_max_daily: Mapped[int] = mapped_column(Integer, default=10)

    items: Mapped[list["Item"]] = relationship(back_populates="owner")


class Item(Base):
    __tablename__ = "items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    type: Mapped[str] = mapped_column(Text, index=True)  # lost / found
    category: Mapped[str] = mapped_column(Text, default="")
    item_name: Mapped[str] = mapped_column(Text, default="")
    description: Mapped[str] = mapped_column(Text, default="")
    location: Mapped[str] = mapped_column(Text, default="", index=True)
    date: Mapped[date_ | None] = mapped_column(Date, nullable=True)
    contact_info: Mapped[str] = mapped_column(Text, default="")
    image: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    status: Mapped[str] = mapped_column(Text, default="active", index=True)  # active / resolved

    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    owner: Mapped["User"] = relationship(back_populates="items")


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        # One notification per (recipient, related item); duplicates are skipped on insert
        UniqueConstraint("user_id", "item_id", name="uq_notification_user_item"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), index=True)
    item_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("items.id"), nullable=True)
    item_name: Mapped[str] = mapped_column(Text, default="")
    location: Mapped[str] = mapped_column(Text, default="")
    type: Mapped[str] = mapped_column(Text, index=True)
    # lost / found / match_found / location_risk / location_hotspot / fraud_alert
    date: Mapped[date_ | None] = mapped_column(Date, nullable=True)
    image: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    message: Mapped[str] = mapped_column(Text, default="")

    similarity_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    action_required: Mapped[bool] = mapped_column(Boolean, default=False)

    read_status: Mapped[bool] = mapped_column(Boolean, default=False)
    is_viewed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, index=True)

    deliveries: Mapped[list["DeliveryLog"]] = relationship(
        back_populates="notification", cascade="all, delete-orphan",
    )


class DeliveryLog(Base):
    __tablename__ = "delivery_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    notification_id: Mapped[int] = mapped_column(Integer, ForeignKey("notifications.id"))
    channel: Mapped[str] = mapped_column(Text)  # LogNotifier / WebhookNotifier
    success: Mapped[bool] = mapped_column(Boolean, default=True)
    message: Mapped[str] = mapped_column(Text, default="")
    sent_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)

    notification: Mapped["Notification"] = relationship(back_populates="deliveries")
