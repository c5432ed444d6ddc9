"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get type validation at startup
and one documented place for every knob.

Mock mode enables local development without a real bucket.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like api_keys), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Upload Service API"
    api_version: str = "v1"
    api_keys: str = Field(
        default="dev-key-1,dev-key-2",
        description="Comma-separated API keys accepted in the X-API-Key header."
    )

    # Object Storage Configuration
    storage_bucket_name: str = Field(
        default="uploads",
        description="Bucket every upload is written to"
    )
    storage_access_key_id: str = Field(
        default="",
        description="Access key ID for the S3-compatible store"
    )
    storage_secret_access_key: str = Field(
        default="",
        description="Secret access key for the S3-compatible store"
    )
    storage_endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom endpoint (R2, MinIO). Leave unset for AWS S3."
    )
    storage_region: str = Field(
        default="us-east-1",
        description="Storage region. R2 uses 'auto'."
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of a real bucket."
    )

    # Upload Behavior
    upload_max_workers: int = Field(
        default=4,
        ge=1,
        description="Concurrent background uploads. Also caps scratch files on disk."
    )
    upload_scratch_dir: Optional[str] = Field(
        default=None,
        description="Directory for scratch files. System temp dir if unset."
    )
    upload_random_key_suffix: bool = Field(
        default=False,
        description="Append a random suffix to name-derived keys so same-second uploads don't collide."
    )
    max_upload_size_mb: int = Field(
        default=25,
        description="Maximum upload size in MB."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def api_keys_list(self) -> list[str]:
        """Parse comma-separated API keys into a list."""
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        """
        missing = []

        if not self.storage_bucket_name:
            missing.append("STORAGE_BUCKET_NAME")

        # Credentials only required if not in mock mode
        if not self.storage_mock_mode:
            if not self.storage_access_key_id:
                missing.append("STORAGE_ACCESS_KEY_ID")
            if not self.storage_secret_access_key:
                missing.append("STORAGE_SECRET_ACCESS_KEY")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once per process. For tests, call
    get_settings.cache_clear() to reset.
    """
    return Settings()
