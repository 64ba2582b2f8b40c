"""Explicit Firebase Admin SDK bootstrap shared by both entry points."""
from __future__ import annotations

import logging

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore import Client as FirestoreClient

from app.core.config import Settings

logger = logging.getLogger(__name__)


def init_firebase(settings: Settings) -> firebase_admin.App:
    """Initialize the default Firebase app once per process and return it."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
    try:
        if settings.firebase_credentials_path:
            cred = credentials.Certificate(settings.firebase_credentials_path)
            app = firebase_admin.initialize_app(cred, options)
        else:
            # Application Default Credentials (Cloud Run, GOOGLE_APPLICATION_CREDENTIALS)
            app = firebase_admin.initialize_app(options=options)
    except Exception:
        logger.exception("Failed to initialize Firebase Admin SDK")
        raise

    logger.info("Firebase Admin SDK initialized (project=%s)", settings.firebase_project_id or "default")
    return app


def get_firestore_client(app: firebase_admin.App) -> FirestoreClient:
    return firestore.client(app)
