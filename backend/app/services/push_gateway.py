"""Push gateway implementations behind a single multicast call."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Protocol

import firebase_admin
from firebase_admin import messaging

from app.api.schemas.notifications import DeliveryReport, TokenDelivery
from app.core.config import Settings

logger = logging.getLogger(__name__)

# FCM rejects multicast messages addressed to more tokens than this.
FCM_MULTICAST_LIMIT = 500


@dataclass(frozen=True)
class MulticastPayload:
    tokens: List[str]
    data: Dict[str, str] = field(default_factory=dict)


class PushGateway(Protocol):
    def send_multicast(self, payload: MulticastPayload) -> DeliveryReport:
        ...


class FirebasePushGateway:
    """Sends data messages through Firebase Cloud Messaging."""

    def __init__(self, app: firebase_admin.App | None = None) -> None:
        self._app = app

    def send_multicast(self, payload: MulticastPayload) -> DeliveryReport:
        deliveries: List[TokenDelivery] = []
        for start in range(0, len(payload.tokens), FCM_MULTICAST_LIMIT):
            chunk = payload.tokens[start : start + FCM_MULTICAST_LIMIT]
            message = messaging.MulticastMessage(tokens=chunk, data=dict(payload.data))
            batch = messaging.send_each_for_multicast(message, app=self._app)
            for token, item in zip(chunk, batch.responses):
                deliveries.append(
                    TokenDelivery(
                        token=token,
                        success=item.success,
                        message_id=item.message_id,
                        error=str(item.exception) if item.exception else None,
                    )
                )
        return DeliveryReport.from_deliveries(deliveries)


class NoopPushGateway:
    """Drops every message; used when no push provider is configured."""

    def send_multicast(self, payload: MulticastPayload) -> DeliveryReport:
        logger.debug("Push provider is noop; dropping multicast to %s tokens", len(payload.tokens))
        return DeliveryReport()


def build_push_gateway(settings: Settings, app: firebase_admin.App | None = None) -> PushGateway:
    if settings.notifications_provider == "fcm":
        return FirebasePushGateway(app)
    return NoopPushGateway()
