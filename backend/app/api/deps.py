"""FastAPI dependencies for request-scoped collaborators."""
from __future__ import annotations

import logging

from fastapi import HTTPException, Request, status

from app.services.push_gateway import PushGateway

logger = logging.getLogger(__name__)


def get_push_gateway(request: Request) -> PushGateway:
    return request.app.state.push_gateway


def require_allowed_origin(request: Request) -> None:
    """Reject callers whose Origin header is missing or not allowlisted."""
    origin = request.headers.get("origin")
    allowed = request.app.state.settings.cors_allowed_origins
    if origin not in allowed:
        logger.warning("Rejected %s %s from origin=%s", request.method, request.url.path, origin)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="")
