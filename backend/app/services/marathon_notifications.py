"""Daily marathon notifications: registration opening today, race tomorrow."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, List, Optional

from google.cloud.firestore import Client as FirestoreClient
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.services.notification_dispatcher import send_push_notification
from app.services.push_gateway import PushGateway
from app.services.subscribers import fetch_subscriber_tokens

logger = logging.getLogger(__name__)

_DATE_FORMATS = ("%Y-%m-%d", "%Y.%m.%d", "%Y/%m/%d")


class InvalidMarathonDateError(ValueError):
    """Raised when a marathon date field cannot be read as a calendar date."""


@dataclass
class MarathonNotificationRunStats:
    success: bool
    events_processed: int = 0
    notifications_sent: int = 0
    events_failed: int = 0
    error: Optional[str] = None


def run_marathon_notification_check(
    db: FirestoreClient,
    gateway: PushGateway,
    today: date | None = None,
) -> MarathonNotificationRunStats:
    """Scan every marathon once and notify subscribers whose trigger dates match."""
    if not settings.notifications_enabled:
        return MarathonNotificationRunStats(success=True)

    tz = ZoneInfo(settings.scheduler_timezone)
    today = today or datetime.now(tz).date()
    tomorrow = today + timedelta(days=1)
    resolve_tokens = _audience_resolver(db)

    stats = MarathonNotificationRunStats(success=True)
    try:
        snapshots = db.collection(settings.marathons_collection).stream()
        for snapshot in snapshots:
            marathon_id = snapshot.id
            logger.info("Processing marathon: %s", marathon_id)
            stats.events_processed += 1
            try:
                stats.notifications_sent += _notify_marathon(
                    gateway,
                    marathon_id,
                    snapshot.to_dict() or {},
                    today=today,
                    tomorrow=tomorrow,
                    tz=tz,
                    resolve_tokens=resolve_tokens,
                )
            except Exception:
                stats.events_failed += 1
                logger.exception("Failed to process notifications for marathon %s", marathon_id)
    except Exception as exc:
        logger.error("Error sending marathon notifications: %s", exc)
        stats.success = False
        stats.error = str(exc)
    return stats


def _notify_marathon(
    gateway: PushGateway,
    marathon_id: str,
    marathon: dict,
    *,
    today: date,
    tomorrow: date,
    tz: ZoneInfo,
    resolve_tokens: Callable[[str, dict], List[str]],
) -> int:
    name = marathon.get("name") or marathon_id
    messages = []

    registration = marathon.get("registrationPeriod") or {}
    if to_local_date(registration.get("startDate"), tz) == today:
        messages.append(settings.registration_open_body)
    if to_local_date(marathon.get("date"), tz) == tomorrow:
        messages.append(settings.day_before_body)

    sent = 0
    for body in messages:
        tokens = resolve_tokens(marathon_id, marathon)
        if not tokens:
            logger.info("Marathon %s has no subscribers for %r", marathon_id, body)
            continue
        result = send_push_notification(
            gateway,
            title=name,
            body=body,
            tokens=tokens,
            icon=settings.notification_icon_url,
        )
        if result.success:
            sent += 1
    return sent


def _audience_resolver(db: FirestoreClient) -> Callable[[str, dict], List[str]]:
    if settings.subscriber_source == "embedded":
        return lambda marathon_id, marathon: [token for token in marathon.get("tokens") or [] if token]
    return lambda marathon_id, marathon: fetch_subscriber_tokens(db, marathon_id)


def to_local_date(value: Any, tz: ZoneInfo) -> date | None:
    """Normalize a Firestore timestamp, date or date string to a calendar date in ``tz``."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(tz).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        try:
            return to_local_date(datetime.fromisoformat(text.replace("Z", "+00:00")), tz)
        except ValueError:
            pass
    raise InvalidMarathonDateError(f"Unrecognized marathon date value: {value!r}")
