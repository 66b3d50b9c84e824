"""FastAPI application with lifespan-managed notifiers and hotspot monitor."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api.router import api_router
from .config import settings
from .database import run_migrations
from .monitor.scheduler import HotspotMonitor
from .notifier.log_notifier import LogNotifier
from .notifier.webhook import WebhookNotifier

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Shared state accessible by API endpoints
app_state: dict = {}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Running database migrations...")
    run_migrations()

    notifiers = [LogNotifier()]
    if settings.webhook_enabled:
        notifiers.append(WebhookNotifier())
        logger.info("Webhook delivery enabled (%s)", settings.webhook_type)
    app_state["notifiers"] = notifiers

    monitor = None
    if settings.hotspot_monitor_enabled:
        monitor = HotspotMonitor()
        monitor.start()
        app_state["hotspot_monitor"] = monitor
    else:
        logger.info("Hotspot monitor disabled")

    logger.info("Reclaim started on %s:%d", settings.host, settings.port)

    yield

    # Shutdown
    if monitor is not None:
        monitor.shutdown()
    app_state.clear()
    logger.info("Reclaim stopped")


app = FastAPI(
    title="Reclaim",
    description="Lost & found item matching and notification service",
    version="0.1.0",
    lifespan=lifespan,
)
if settings.api_key:
    from .auth import ApiKeyMiddleware
    app.add_middleware(ApiKeyMiddleware)

app.include_router(api_router)
