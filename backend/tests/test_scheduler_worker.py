from __future__ import annotations

import pytest

from app.services.marathon_notifications import MarathonNotificationRunStats
from app.worker import scheduler_main


def _set_valid_schedule(monkeypatch):
    monkeypatch.setattr(scheduler_main.settings, "notification_job_hour", 8)
    monkeypatch.setattr(scheduler_main.settings, "notification_job_minute", 0)
    monkeypatch.setattr(scheduler_main.settings, "scheduler_timezone", "Asia/Seoul")


class DummyScheduler:
    instances: list = []

    def __init__(self, timezone=None):
        self.timezone = timezone
        self.running = False
        self.jobs = []
        DummyScheduler.instances.append(self)

    def add_job(self, func, *args, **kwargs):
        self.jobs.append((func, kwargs))

    def start(self):
        self.running = True

    def shutdown(self, wait=False):
        self.running = False


@pytest.fixture()
def stub_firebase(monkeypatch, gateway, firestore_db):
    monkeypatch.setattr(scheduler_main, "init_firebase", lambda settings: object())
    monkeypatch.setattr(scheduler_main, "get_firestore_client", lambda app: firestore_db)
    monkeypatch.setattr(scheduler_main, "build_push_gateway", lambda settings, app: gateway)
    return firestore_db, gateway


def test_worker_warns_when_disabled(monkeypatch, caplog):
    _set_valid_schedule(monkeypatch)
    monkeypatch.setattr(scheduler_main.settings, "scheduler_enabled", False)
    monkeypatch.setattr(
        scheduler_main, "init_firebase", lambda settings: pytest.fail("firebase must not be initialized")
    )
    caplog.set_level("WARNING")
    scheduler_main.main()
    assert "SCHEDULER_ENABLED=false" in caplog.text


def test_worker_registers_daily_cron_job(monkeypatch, caplog, stub_firebase):
    _set_valid_schedule(monkeypatch)
    monkeypatch.setattr(scheduler_main.settings, "scheduler_enabled", True)
    monkeypatch.setattr(scheduler_main.settings, "jobs_run_on_startup", False)
    monkeypatch.setattr(scheduler_main, "BackgroundScheduler", DummyScheduler)
    monkeypatch.setattr(scheduler_main, "_wait_forever", lambda event: None)
    monkeypatch.setattr(scheduler_main.signal, "signal", lambda *args, **kwargs: None)
    DummyScheduler.instances.clear()

    caplog.set_level("INFO")
    scheduler_main.main()

    assert "Scheduler enabled" in caplog.text
    assert "Registered scheduler jobs" in caplog.text
    scheduler = DummyScheduler.instances[0]
    assert scheduler.timezone == "Asia/Seoul"
    assert scheduler.running is True
    func, kwargs = scheduler.jobs[0]
    assert func is scheduler_main._run_marathon_notification_job
    assert kwargs["trigger"] == "cron"
    assert (kwargs["hour"], kwargs["minute"]) == (8, 0)
    assert kwargs["args"] == stub_firebase


def test_worker_runs_job_on_startup(monkeypatch, stub_firebase):
    _set_valid_schedule(monkeypatch)
    monkeypatch.setattr(scheduler_main.settings, "scheduler_enabled", True)
    monkeypatch.setattr(scheduler_main.settings, "jobs_run_on_startup", True)
    monkeypatch.setattr(scheduler_main, "BackgroundScheduler", DummyScheduler)
    monkeypatch.setattr(scheduler_main, "_wait_forever", lambda event: None)
    monkeypatch.setattr(scheduler_main.signal, "signal", lambda *args, **kwargs: None)

    calls = []

    def fake_check(db, gateway):
        calls.append((db, gateway))
        return MarathonNotificationRunStats(success=True)

    monkeypatch.setattr(scheduler_main, "run_marathon_notification_check", fake_check)
    scheduler_main.main()
    assert calls == [stub_firebase]


def test_job_execution_logs_summary(monkeypatch, caplog, gateway, firestore_db):
    monkeypatch.setattr(
        scheduler_main,
        "run_marathon_notification_check",
        lambda db, gw: MarathonNotificationRunStats(
            success=True, events_processed=3, notifications_sent=2, events_failed=1
        ),
    )
    caplog.set_level("INFO")
    scheduler_main._run_marathon_notification_job(firestore_db, gateway)
    assert "Job marathon_notifications complete: events=3, notifications=2, failed_events=1" in caplog.text


def test_job_execution_logs_failed_run(monkeypatch, caplog, gateway, firestore_db):
    monkeypatch.setattr(
        scheduler_main,
        "run_marathon_notification_check",
        lambda db, gw: MarathonNotificationRunStats(success=False, error="permission denied"),
    )
    caplog.set_level("ERROR")
    scheduler_main._run_marathon_notification_job(firestore_db, gateway)
    assert "Job marathon_notifications failed: permission denied" in caplog.text


def test_validate_config_errors(monkeypatch):
    _set_valid_schedule(monkeypatch)
    monkeypatch.setattr(scheduler_main.settings, "notification_job_hour", 24)
    with pytest.raises(ValueError):
        scheduler_main._validate_config()
    monkeypatch.setattr(scheduler_main.settings, "notification_job_hour", 8)
    monkeypatch.setattr(scheduler_main.settings, "notification_job_minute", 60)
    with pytest.raises(ValueError):
        scheduler_main._validate_config()
    monkeypatch.setattr(scheduler_main.settings, "notification_job_minute", 0)
    monkeypatch.setattr(scheduler_main.settings, "scheduler_timezone", "Mars/Olympus_Mons")
    with pytest.raises(ValueError):
        scheduler_main._validate_config()


def test_invalid_config_exits(monkeypatch):
    monkeypatch.setattr(scheduler_main.settings, "notification_job_hour", 99)
    with pytest.raises(SystemExit) as excinfo:
        scheduler_main.main()
    assert excinfo.value.code == 1
