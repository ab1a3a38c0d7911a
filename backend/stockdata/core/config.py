import os
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _build_default_database_url() -> str:
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    db = os.getenv("POSTGRES_DB", "stockdata")
    user = os.getenv("POSTGRES_USER", "postgres")
    password = os.getenv("POSTGRES_PASSWORD", "postgres")
    return f"postgresql+psycopg2://{user}:{password}@{host}:{port}/{db}"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    PROJECT_NAME: str = "Stock Data API"
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = Field(default_factory=_build_default_database_url)
    AUTO_CREATE_TABLES: bool = True
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    UPLOAD_DIR: str = "upload/csv/"
    CSV_FILE_SIZE_LIMIT: int = 10 * 1024 * 1024
    UPLOAD_CHUNK_SIZE: int = 64 * 1024
    INSERT_BATCH_SIZE: int = 500

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _split_cors_origins(cls, value):
        if isinstance(value, str):
            return [v.strip() for v in value.split(",") if v.strip()]
        return value

    @field_validator("CSV_FILE_SIZE_LIMIT", "UPLOAD_CHUNK_SIZE", "INSERT_BATCH_SIZE")
    @classmethod
    def _validate_positive(cls, value, info):
        if value <= 0:
            raise ValueError(f"{info.field_name} must be a positive integer")
        return value

    @field_validator("AUTO_CREATE_TABLES")
    @classmethod
    def _validate_auto_create(cls, value, info):
        env = str(info.data.get("ENV", "dev")).lower()
        if env != "dev" and value:
            raise ValueError("AUTO_CREATE_TABLES must be false in non-dev environments; run alembic instead")
        return value


settings = Settings()
