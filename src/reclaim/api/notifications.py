"""Per-user notification inbox."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import Notification, User
from ..schemas import NotificationListResponse, NotificationResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/notifications", tags=["notifications"])

INBOX_LIMIT = 50


def _inbox(db: Session, user: User):
    q = db.query(Notification).filter(Notification.user_id == user.id)
    if user.registered_at is not None:
        q = q.filter(Notification.created_at >= user.registered_at)
    return q


@router.get("", response_model=NotificationListResponse, response_model_by_alias=True)
def list_notifications(
    limit: int = INBOX_LIMIT,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    limit = max(0, min(limit, INBOX_LIMIT))
    rows = (
        _inbox(db, user)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )
    return NotificationListResponse(notifications=rows, count=len(rows))


@router.get("/unread", response_model=NotificationListResponse, response_model_by_alias=True)
def unread_notifications(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    rows = (
        _inbox(db, user)
        .filter(Notification.read_status == False)  # noqa: E712
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )
    return NotificationListResponse(notifications=rows, count=len(rows))


@router.post("/{notification_id}/read", response_model=NotificationResponse, response_model_by_alias=True)
def mark_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    notification = db.get(Notification, notification_id)
    if not notification:
        raise HTTPException(404, f"Notification {notification_id} not found")
    if notification.user_id != user.id:
        raise HTTPException(403, "Not your notification")
    notification.read_status = True
    notification.is_viewed = True
    db.commit()
    db.refresh(notification)
    return notification


@router.post("/read-all")
def mark_all_read(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    count = (
        db.query(Notification)
        .filter(Notification.user_id == user.id, Notification.read_status == False)  # noqa: E712
        .update({"read_status": True, "is_viewed": True}, synchronize_session=False)
    )
    db.commit()
    logger.info("User #%d marked %d notification(s) read", user.id, count)
    return {"updated": count}
