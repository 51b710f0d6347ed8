"""Application configuration using Pydantic Settings."""
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "Tutorbook"
    debug: bool = False

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "tutorbook"

    # JWT
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60
    jwt_refresh_token_expire_days: int = 30

    # Tutoring rules
    target_classes: int = 12  # classes per student per month
    on_track_threshold: int = 8  # secondary threshold used by summaries and report badges
    default_preferred_time: str = "18:30"
    progress_policy: Literal["pace", "fixed"] = "pace"

    # Seeded tutor account (skipped unless both email and password are set)
    tutor_email: str = ""
    tutor_password: str = ""
    tutor_full_name: str = "Tutor"

    # CORS (comma-separated origins, e.g. "https://tutor.example.com,http://localhost:5173")
    cors_origins: str = "http://localhost:5173"

    @model_validator(mode="after")
    def _validate_production_secrets(self):
        if not self.debug:
            if self.jwt_secret_key in ("change-me-in-production", ""):
                raise ValueError(
                    "JWT_SECRET_KEY must be set to a strong secret when DEBUG is not enabled. "
                    "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
                )
        return self


settings = Settings()
