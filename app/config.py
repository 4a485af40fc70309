# app/config.py
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str
    env: Literal["dev", "stage", "prod"]
    debug: bool = False
    log_level: str = "INFO"
    access_log: bool = True
    sql_echo: bool = True
    auto_init_db: bool = True

    # Media storage settings
    s3_bucket_name: Optional[str] = None
    s3_region: str = "us-east-1"
    s3_access_key_id: Optional[str] = None
    s3_secret_access_key: Optional[str] = None
    s3_endpoint_url: Optional[str] = None  # Tigris, R2, MinIO
    s3_public_url_base: Optional[str] = None  # CDN origin
    image_storage_local: bool = False  # True = local filesystem (dev only)
    upload_dir: str = "uploads"

    # Upload limits
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_image_types: frozenset[str] = frozenset(
        {"image/png", "image/jpeg", "image/jpg", "image/webp", "image/svg+xml"}
    )

    # Admin API client settings
    api_base_url: str = "http://localhost:8080"
    api_timeout_seconds: float = 10.0

    # Payment status polling
    payment_poll_interval_seconds: float = 3.0
    payment_poll_max_attempts: int = 40
    payment_poll_backoff: float = 1.0  # 1.0 = fixed interval
    payment_poll_max_interval_seconds: float = 30.0

    @property
    def is_dev(self) -> bool:
        return self.env == "dev" or self.debug is True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()  # type: ignore[call-arg]
