"""User registration, notification preferences, statistics and trust reports."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..analytics.fraud import analyze_behavior
from ..auth import get_current_user
from ..config import settings
from ..database import get_db
from ..models import Item, Notification, User
from ..notifier.ranker import preferences_for
from ..schemas import (
    PreferencesResponse,
    PreferencesUpdate,
    TrustReportResponse,
    UserCreate,
    UserResponse,
    UserStatsResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=201)
def create_user(body: UserCreate, db: Session = Depends(get_db)):
    email = body.email.strip().lower()
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        raise HTTPException(409, f"User {email} already registered")

    user = User(email=email, name=body.name, is_admin=email in settings.admin_email_set)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user #%d (%s)", user.id, email)
    return user


@router.get("/me/stats", response_model=UserStatsResponse)
def my_stats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    q = db.query(Item).filter(Item.user_id == user.id)
    return UserStatsResponse(
        lost_items=q.filter(Item.type == "lost").count(),
        found_items=q.filter(Item.type == "found").count(),
    )


@router.get("/me/preferences", response_model=PreferencesResponse)
def get_preferences(user: User = Depends(get_current_user)):
    return PreferencesResponse.model_validate(preferences_for(user))


@router.put("/me/preferences", response_model=PreferencesResponse)
def update_preferences(
    body: PreferencesUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    fields = {
        "minimum_similarity": "notify_min_similarity",
        "include_location_alerts": "notify_location_alerts",
        "include_new_items": "notify_new_items",
        "max_daily": "notify_max_daily",
    }
    for key, value in body.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(user, fields[key], value)
    db.commit()
    db.refresh(user)
    logger.info("User #%d updated notification preferences", user.id)
    return PreferencesResponse.model_validate(preferences_for(user))


@router.get("/{user_id}/trust", response_model=TrustReportResponse)
def trust_report(
    user_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not user.is_admin and user.id != user_id:
        raise HTTPException(403, "Only admins can review other users")
    if not db.get(User, user_id):
        raise HTTPException(404, f"User {user_id} not found")

    items = db.query(Item).filter(Item.user_id == user_id).all()
    notifications = db.query(Notification).filter(Notification.user_id == user_id).all()
    report = analyze_behavior(user_id, items, notifications)
    return TrustReportResponse.model_validate(report)
