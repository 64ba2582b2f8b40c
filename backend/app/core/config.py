"""Application configuration managed via environment variables."""
from functools import lru_cache
from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Runal Push Backend"
    debug: bool = False
    log_level: str = "INFO"
    firebase_project_id: str | None = None
    firebase_credentials_path: str | None = None
    cors_allowed_origins: List[str] = [
        "http://localhost:5173",
        "https://dev-runal.netlify.app",
        "https://runal.netlify.app",
    ]
    cors_allowed_methods: List[str] = ["POST", "OPTIONS"]
    cors_allowed_headers: List[str] = ["Content-Type"]
    scheduler_enabled: bool = True
    scheduler_timezone: str = "Asia/Seoul"
    notification_job_hour: int = 8
    notification_job_minute: int = 0
    jobs_run_on_startup: bool = False
    notifications_enabled: bool = True
    notifications_provider: Literal["fcm", "noop"] = "fcm"
    marathons_collection: str = "marathons"
    users_collection: str = "users"
    subscriber_source: Literal["users", "embedded"] = "users"
    registration_open_body: str = "대회 신청일입니다!"
    day_before_body: str = "내일 대회가 있습니다! 준비하세요."
    notification_icon_url: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
