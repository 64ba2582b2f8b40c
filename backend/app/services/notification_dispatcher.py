"""Multicast push dispatch normalized into a NotificationResult."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from app.api.schemas.notifications import NotificationResult
from app.services.push_gateway import MulticastPayload, PushGateway

NO_VALID_TOKENS_ERROR = "No valid delivery tokens"

logger = logging.getLogger(__name__)


def send_push_notification(
    gateway: PushGateway,
    *,
    title: str,
    body: str,
    tokens: Iterable[Optional[str]],
    icon: Optional[str] = None,
) -> NotificationResult:
    """Send one multicast message; gateway errors are returned, never raised."""
    valid_tokens = _clean_tokens(tokens)
    if not valid_tokens:
        logger.warning("Skipping push notification %r: no valid tokens", title)
        return NotificationResult(success=False, error=NO_VALID_TOKENS_ERROR)

    data = {"title": title, "body": body}
    if icon:
        data["icon"] = icon
    payload = MulticastPayload(tokens=valid_tokens, data=data)

    try:
        report = gateway.send_multicast(payload)
    except Exception as exc:
        logger.error("Error sending push notification %r to %s tokens: %s", title, len(valid_tokens), exc)
        return NotificationResult(success=False, error=str(exc))

    logger.info(
        "Push notification %r sent: tokens=%s delivered=%s failed=%s",
        title,
        len(valid_tokens),
        report.success_count,
        report.failure_count,
    )
    return NotificationResult(success=True, response=report)


def _clean_tokens(tokens: Iterable[Optional[str]]) -> List[str]:
    seen: set[str] = set()
    cleaned: List[str] = []
    for token in tokens or []:
        if not token or not isinstance(token, str) or not token.strip():
            continue
        if token in seen:
            continue
        seen.add(token)
        cleaned.append(token)
    return cleaned
