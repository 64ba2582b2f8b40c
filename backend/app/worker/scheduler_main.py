"""Dedicated APScheduler worker process for daily marathon notifications."""
from __future__ import annotations

import logging
import signal
import sys
import threading
from time import perf_counter
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.config import settings
from app.core.firebase import get_firestore_client, init_firebase
from app.core.logging import configure_logging
from app.services.marathon_notifications import run_marathon_notification_check
from app.services.push_gateway import PushGateway, build_push_gateway

logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging(log_level=settings.log_level)
    try:
        _validate_config()
    except ValueError as exc:
        logger.error("Invalid scheduler configuration: %s", exc)
        sys.exit(1)

    logger.info("Scheduler worker starting (enabled=%s)", settings.scheduler_enabled)

    if not settings.scheduler_enabled:
        logger.warning("Scheduler worker started but SCHEDULER_ENABLED=false. No jobs will run.")
        return

    firebase_app = init_firebase(settings)
    db = get_firestore_client(firebase_app)
    gateway = build_push_gateway(settings, firebase_app)

    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)
    _register_jobs(scheduler, db, gateway)
    logger.info(
        "Scheduler enabled (tz=%s, marathon_notifications=daily %02d:%02d)",
        settings.scheduler_timezone,
        settings.notification_job_hour,
        settings.notification_job_minute,
    )
    logger.info(
        "Notifications config: enabled=%s provider=%s subscribers=%s",
        settings.notifications_enabled,
        settings.notifications_provider,
        settings.subscriber_source,
    )
    scheduler.start()
    if settings.jobs_run_on_startup:
        logger.info("Running jobs once on startup")
        _run_marathon_notification_job(db, gateway)

    stop_event = threading.Event()

    def shutdown(signum, frame):  # pragma: no cover - signal handler
        logger.info("Scheduler worker shutting down (signal=%s)", signum)
        if scheduler.running:
            scheduler.shutdown(wait=False)
        stop_event.set()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    try:
        _wait_forever(stop_event)
    except KeyboardInterrupt:  # pragma: no cover - manual stop
        shutdown(signal.SIGINT, None)


def _register_jobs(scheduler: BackgroundScheduler, db, gateway: PushGateway) -> None:
    scheduler.add_job(
        _run_marathon_notification_job,
        trigger="cron",
        hour=settings.notification_job_hour,
        minute=settings.notification_job_minute,
        args=(db, gateway),
        id="marathon_notifications_job",
        replace_existing=True,
    )
    logger.info(
        "Registered scheduler jobs (tz=%s): marathon_notifications daily %02d:%02d",
        settings.scheduler_timezone,
        settings.notification_job_hour,
        settings.notification_job_minute,
    )


def _run_marathon_notification_job(db, gateway: PushGateway) -> None:
    _execute_job(
        job_name="marathon_notifications",
        runner=lambda: run_marathon_notification_check(db, gateway),
        scheduled_run_time=datetime.now(timezone.utc),
    )


def _execute_job(job_name: str, runner, scheduled_run_time=None) -> None:
    start = perf_counter()
    scheduled_str = scheduled_run_time.isoformat() if scheduled_run_time else None
    logger.info("Job %s starting (scheduled_run_time=%s)", job_name, scheduled_str or "now")

    try:
        result = runner()
    except Exception:  # pragma: no cover - runner reports its own failures
        logger.exception("Job %s failed", job_name)
        return

    duration_ms = (perf_counter() - start) * 1000
    if not result.success:
        logger.error("Job %s failed: %s (duration_ms=%0.2f)", job_name, result.error, duration_ms)
        return
    logger.info(
        "Job %s complete: events=%s, notifications=%s, failed_events=%s, duration_ms=%0.2f",
        job_name,
        result.events_processed,
        result.notifications_sent,
        result.events_failed,
        duration_ms,
    )


def _validate_config() -> None:
    if not (0 <= settings.notification_job_hour <= 23):
        raise ValueError("NOTIFICATION_JOB_HOUR must be between 0 and 23")
    if not (0 <= settings.notification_job_minute <= 59):
        raise ValueError("NOTIFICATION_JOB_MINUTE must be between 0 and 59")
    try:
        ZoneInfo(settings.scheduler_timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"SCHEDULER_TIMEZONE is not a valid timezone: {settings.scheduler_timezone}") from exc


def _wait_forever(stop_event: threading.Event) -> None:
    stop_event.wait()


if __name__ == "__main__":  # pragma: no cover - manual launch
    main()
