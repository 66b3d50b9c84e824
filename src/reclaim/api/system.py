"""Health check and scheduler control endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..models import Item
from ..schemas import HealthResponse, ServiceStatus

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    from ..main import app_state

    services: list[ServiceStatus] = []
    overall = "ok"

    # Database
    try:
        total = db.query(Item).count()
        active = db.query(Item).filter(Item.status == "active").count()
        services.append(ServiceStatus(name="database", status="ok"))
    except SQLAlchemyError as e:
        logger.warning("Health check: DB error: %s", e)
        total = active = 0
        services.append(ServiceStatus(name="database", status="degraded", detail=str(e)))
        overall = "degraded"

    # Hotspot scheduler
    monitor = app_state.get("hotspot_monitor")
    running = monitor.running if monitor else False
    if running:
        services.append(ServiceStatus(name="hotspot_monitor", status="ok"))
    elif settings.hotspot_monitor_enabled:
        services.append(ServiceStatus(name="hotspot_monitor", status="unavailable", detail="not running"))
        overall = "degraded"
    else:
        services.append(ServiceStatus(name="hotspot_monitor", status="unavailable", detail="disabled"))

    # Webhook
    if settings.webhook_enabled:
        services.append(ServiceStatus(name="webhook", status="ok", detail=settings.webhook_type))
    else:
        services.append(ServiceStatus(name="webhook", status="unavailable", detail="not configured"))

    return HealthResponse(
        status=overall,
        scheduler_running=running,
        item_count=total,
        active_count=active,
        services=services,
    )


@router.post("/scheduler/pause")
def pause_scheduler():
    from ..main import app_state

    monitor = app_state.get("hotspot_monitor")
    if monitor:
        monitor.pause()
    return {"status": "paused"}


@router.post("/scheduler/resume")
def resume_scheduler():
    from ..main import app_state

    monitor = app_state.get("hotspot_monitor")
    if monitor:
        monitor.resume()
    return {"status": "resumed"}
