"""Location hotspot analytics."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..analytics.hotspots import analyze_hotspots, location_risk, location_stats
from ..database import get_db
from ..models import Item
from ..schemas import CategoryCount, HotspotResponse, LocationSummaryResponse

router = APIRouter(prefix="/api/insights", tags=["insights"])


@router.get("/hotspots", response_model=HotspotResponse)
def hotspots(refresh: bool = False, db: Session = Depends(get_db)):
    from ..main import app_state

    monitor = app_state.get("hotspot_monitor")
    report = None if refresh or monitor is None else monitor.last_report
    if report is None:
        report = analyze_hotspots(db.query(Item).all())
    return HotspotResponse.model_validate(report)


@router.get("/locations/{location}", response_model=LocationSummaryResponse)
def location_summary(location: str, db: Session = Depends(get_db)):
    items = db.query(Item).filter(Item.location == location).all()
    summary = location_stats(location, items)
    return LocationSummaryResponse(
        location=summary.location,
        total_reports=summary.total_reports,
        lost_items=summary.lost_items,
        found_items=summary.found_items,
        most_common_categories=[
            CategoryCount(category=c, count=n) for c, n in summary.most_common_categories
        ],
        loss_risk=location_risk(location, items),
    )
