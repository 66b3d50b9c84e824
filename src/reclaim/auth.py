"""Request authentication.

Two layers:
- ``ApiKeyMiddleware``: when API_KEY is set in .env, every /api/ endpoint
  requires ``X-API-Key: <key>`` (or ``?api_key=<key>``).
- ``get_current_user``: resolves the acting user from the ``X-User-Id``
  header for endpoints that read or change per-user data.
"""

from __future__ import annotations

import secrets

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from .config import settings
from .database import get_db
from .models import User

# Reachable without a key so load balancers can health-check the service
PUBLIC_PATHS = ("/api/openapi.json", "/api/health")


class ApiKeyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if not settings.api_key:
            return await call_next(request)

        path = request.url.path
        if not path.startswith("/api/") or path in PUBLIC_PATHS:
            return await call_next(request)

        key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if not key or not secrets.compare_digest(key, settings.api_key):
            return JSONResponse(
                status_code=401,
                content={"detail": "Invalid or missing API key"},
            )

        return await call_next(request)


def get_current_user(
    x_user_id: int | None = Header(None),
    db: Session = Depends(get_db),
) -> User:
    if x_user_id is None:
        raise HTTPException(401, "X-User-Id header required")
    user = db.get(User, x_user_id)
    if not user:
        raise HTTPException(401, f"Unknown user {x_user_id}")
    return user
