# app/core/config.py

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.utils.logger import get_logger

logger = get_logger(__name__)


#
# =====================================================
#                    SETTINGS CLASS
# =====================================================
#


class Settings(BaseSettings):
    """
    Application Settings
    """

    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", case_sensitive=False
    )

    environment: str = "development"
    allowed_cors_urls: str = "*"

    # Full SQLAlchemy URL wins over the individual DB fields
    database_url: Optional[str] = None

    # DB values (support .env)
    db_host: str = "localhost"
    db_user: str = "postgres"
    db_password: str = ""
    db_database: str = "youth_program"
    db_port: int = 5432

    # Export pipeline
    exports_dir: str = "data/exports"
    export_task_backend: str = "background"  # "background" or "celery"

    # Celery broker / result backend (used when export_task_backend == "celery")
    celery_broker: str = "redis://localhost:6379/0"
    celery_backend: str = "redis://localhost:6379/1"

    # Logging configuration
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("export_task_backend")
    @classmethod
    def validate_task_backend(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("background", "celery"):
            raise ValueError("export_task_backend must be 'background' or 'celery'")
        return value

    @property
    def sqlalchemy_database_url(self) -> str:
        """SQLAlchemy connection URL for the relational store."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_database}"
        )

    @property
    def exports_path(self) -> Path:
        return Path(self.exports_dir)

    @property
    def cors_origins(self) -> list[str]:
        return [url.strip() for url in self.allowed_cors_urls.split(",") if url.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    loaded = Settings()
    logger.info(
        "Loaded settings",
        environment=loaded.environment,
        exports_dir=loaded.exports_dir,
        export_task_backend=loaded.export_task_backend,
    )
    return loaded


settings = get_settings()
