"""Report, browse and resolve lost/found items."""

from __future__ import annotations

import base64
import binascii
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..analytics.fraud import validate_item_claim
from ..analytics.hotspots import predict_item_location
from ..auth import get_current_user
from ..database import get_db
from ..matching import MatchingConfigError
from ..matching.keywords import parse_description
from ..models import Item, User
from ..notifier.base import BaseNotifier
from ..notifier.log_notifier import LogNotifier
from ..repository import SqlItemRepository
from ..schemas import (
    ClaimCheckResponse,
    ItemAnalysisResponse,
    ItemCreate,
    ItemListResponse,
    ItemReportResponse,
    ItemResponse,
    MatchResponse,
)
from ..service import MatchingService, deliver_notifications

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/items", tags=["items"])


def _get_notifiers() -> list[BaseNotifier]:
    from ..main import app_state
    return app_state.get("notifiers") or [LogNotifier()]


def _get_service(db: Session) -> MatchingService:
    try:
        return MatchingService.for_session(db)
    except MatchingConfigError as e:
        raise HTTPException(500, f"Matching misconfigured: {e}")


def _load_item(db: Session, item_id: int) -> Item:
    item = db.get(Item, item_id)
    if not item:
        raise HTTPException(404, f"Item {item_id} not found")
    return item


def _decode_image(data: str | None) -> bytes | None:
    if not data:
        return None
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(400, "image must be base64-encoded")


@router.post("", response_model=ItemReportResponse, status_code=201)
async def report_item(
    body: ItemCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = Item(
        type=body.type,
        category=body.category.strip(),
        item_name=body.item_name.strip(),
        description=body.description,
        location=body.location.strip(),
        date=body.date,
        contact_info=body.contact_info,
        image=_decode_image(body.image),
        user_id=user.id,
        status="active",
    )
    service = _get_service(db)
    SqlItemRepository(db).add(item)
    result = service.process_new_item(item)
    db.commit()

    sent = await deliver_notifications(result.notifications, _get_notifiers(), db)
    db.commit()
    if sent:
        logger.info("Item #%d: delivered %d notification(s) externally", item.id, sent)

    db.refresh(item)
    return ItemReportResponse(
        item=item,
        matches=[MatchResponse(item=m.item, score=m.score) for m in result.matches],
        notifications_created=result.notifications_created,
        match_notifications_created=result.match_notifications_created,
        failures=result.failures,
    )


@router.get("", response_model=ItemListResponse)
def list_items(
    type: str | None = None,
    category: str | None = None,
    location: str | None = None,
    status: str = "active",
    db: Session = Depends(get_db),
):
    q = db.query(Item).filter(Item.status == status)
    if type:
        q = q.filter(Item.type == type)
    if category:
        q = q.filter(Item.category == category)
    if location:
        q = q.filter(Item.location == location)
    items = q.order_by(Item.created_at.desc()).all()
    return ItemListResponse(items=items, total=len(items))


@router.get("/mine", response_model=ItemListResponse)
def my_items(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    items = SqlItemRepository(db).fetch_by_user(user.id)
    return ItemListResponse(items=items, total=len(items))


@router.get("/{item_id}", response_model=ItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db)):
    return _load_item(db, item_id)


@router.post("/{item_id}/resolve", response_model=ItemResponse)
def resolve_item(
    item_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    item = _load_item(db, item_id)
    if item.user_id != user.id:
        raise HTTPException(403, "Only the reporter can resolve an item")
    if item.status != "resolved":
        item.status = "resolved"
        db.commit()
        db.refresh(item)
        logger.info("Item #%d resolved by user #%d", item.id, user.id)
    return item


@router.get("/{item_id}/matches", response_model=list[MatchResponse])
def item_matches(item_id: int, db: Session = Depends(get_db)):
    item = _load_item(db, item_id)
    matches = _get_service(db).find_matches_for(item)
    return [MatchResponse(item=m.item, score=m.score) for m in matches]


@router.get("/{item_id}/analysis", response_model=ItemAnalysisResponse)
def analyze_item(item_id: int, db: Session = Depends(get_db)):
    item = _load_item(db, item_id)
    matches = _get_service(db).find_matches_for(item)

    predictions = []
    if item.type == "lost":
        found = db.query(Item).filter(Item.type == "found").all()
        predictions = predict_item_location(item, found)

    return ItemAnalysisResponse(
        item_id=item.id,
        description=parse_description(item.description),
        suggested_matches=[MatchResponse(item=m.item, score=m.score) for m in matches],
        predicted_locations=predictions,
    )


@router.get("/{item_id}/claim-check", response_model=ClaimCheckResponse)
def claim_check(item_id: int, original_id: int, db: Session = Depends(get_db)):
    claim = _load_item(db, item_id)
    original = _load_item(db, original_id)
    if claim.id == original.id:
        raise HTTPException(400, "An item cannot claim itself")
    return ClaimCheckResponse.model_validate(validate_item_claim(claim, original))
