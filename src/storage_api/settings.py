# src/storage_api/settings.py
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_UPLOAD_PART_SIZE = 5 * 1024 * 1024
MAX_LIST_PAGE_SIZE = 1000


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from storage_api.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # Application Settings
    app_name: str = Field(
        default="storage-api",
        description="Application name"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL",
        description="Endpoint for S3-compatible providers (OSS, MinIO, ...)"
    )

    # S3 Configuration
    s3_bucket_name: Optional[str] = Field(
        default=None,
        description="Fixed bucket; containers become key prefixes inside it. "
                    "Unset means one bucket per container."
    )

    list_page_size: int = Field(
        default=MAX_LIST_PAGE_SIZE,
        ge=1,
        le=MAX_LIST_PAGE_SIZE,
        description="MaxKeys sent with each list request"
    )

    upload_part_size: int = Field(
        default=8 * 1024 * 1024,
        ge=MIN_UPLOAD_PART_SIZE,
        description="Multipart upload part size in bytes"
    )

    download_chunk_size: int = Field(
        default=64 * 1024,
        gt=0,
        description="Chunk size used when streaming downloads"
    )

    # HTTP
    cors_allow_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="Origins allowed by the CORS middleware"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @property
    def storage_mode(self) -> str:
        """`prefix` when a fixed bucket is configured, `bucket` otherwise."""
        return "prefix" if self.s3_bucket_name else "bucket"

    @field_validator("s3_bucket_name", "aws_endpoint_url", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty strings from the environment as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        return str(v).upper() if v else "INFO"

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
