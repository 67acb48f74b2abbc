"""Application settings using Pydantic Settings"""
from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./sheet_import.db"

    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    SESSION_SECRET_KEY: str = "change-me-in-production"
    SESSION_COOKIE: str = "sheet_import_session"
    SESSION_MAX_AGE_SECONDS: int = 60 * 60 * 24

    PREVIEW_SESSION_TTL_MINUTES: int = 60
    PREVIEW_PURGE_INTERVAL_MINUTES: int = 5
    SCHEDULER_ENABLED: bool = True

    UPLOAD_MAX_MB: int = 2
    IMPORT_TIMEOUT_SECONDS: float = 30.0
    TIMEZONE: str = "UTC"

    CORS_ORIGINS: str = "*"

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        allowed = ["dev", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of: {allowed}")
        return v

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "prod"

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def upload_max_bytes(self) -> int:
        return self.UPLOAD_MAX_MB * 1024 * 1024

    def validate_secrets_for_production(self) -> None:
        if self.is_production and self.SESSION_SECRET_KEY == "change-me-in-production":
            raise ValueError("SESSION_SECRET_KEY must be set to a secure value in production")

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
