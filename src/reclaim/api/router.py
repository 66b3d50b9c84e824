"""Aggregate all API routers."""

from fastapi import APIRouter

from . import insights, items, notifications, system, users

api_router = APIRouter()
api_router.include_router(users.router)
api_router.include_router(items.router)
api_router.include_router(notifications.router)
api_router.include_router(insights.router)
api_router.include_router(system.router)
