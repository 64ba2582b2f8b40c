"""Resolve delivery tokens for users subscribed to a marathon."""
from __future__ import annotations

import logging
from typing import List

from google.cloud.firestore import Client as FirestoreClient
from google.cloud.firestore_v1.base_query import FieldFilter

from app.core.config import settings

logger = logging.getLogger(__name__)


class SubscriberLookupError(Exception):
    """Raised when the subscriber query against Firestore fails."""


def fetch_subscriber_tokens(db: FirestoreClient, marathon_id: str) -> List[str]:
    try:
        snapshots = (
            db.collection(settings.users_collection)
            .where(filter=FieldFilter("marathons", "array_contains", marathon_id))
            .stream()
        )
        tokens = [(snapshot.to_dict() or {}).get("token") for snapshot in snapshots]
    except Exception as exc:
        logger.error("Error getting subscribers for marathon %s: %s", marathon_id, exc)
        raise SubscriberLookupError("Failed to retrieve subscribers") from exc
    return [token for token in tokens if token]
