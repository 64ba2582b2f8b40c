"""FastAPI entrypoint for on-demand push notifications."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import notifications
from app.core.config import Settings, get_settings
from app.core.firebase import init_firebase
from app.core.logging import configure_logging
from app.services.push_gateway import PushGateway, build_push_gateway

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, push_gateway: PushGateway | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.push_gateway is None:
            firebase_app = init_firebase(settings) if settings.notifications_provider == "fcm" else None
            app.state.push_gateway = build_push_gateway(settings, firebase_app)
        logger.info(
            "%s ready (provider=%s, origins=%s)",
            settings.app_name,
            settings.notifications_provider,
            ",".join(settings.cors_allowed_origins),
        )
        yield

    app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    app.state.settings = settings
    app.state.push_gateway = push_gateway
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_methods=settings.cors_allowed_methods,
        allow_headers=settings.cors_allowed_headers,
    )
    app.include_router(notifications.router)

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok"}

    return app


def _build_default_app() -> FastAPI:
    configure_logging(log_level=get_settings().log_level)
    return create_app()


app = _build_default_app()
