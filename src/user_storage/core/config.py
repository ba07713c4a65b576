"""Configuration management for user-storage."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "user-storage"
    otel_exporter_endpoint: str = "http://localhost:4317"

    # Lifetime of presigned download URLs, in seconds
    url_expires_in: int = 900
    # Credentials closer than this to expiry are fetched again
    credential_refresh_margin: int = 60
    default_content_type: str = "binary/octet-stream"
    s3_api_version: str = "2006-03-01"

    model_config = {
        "env_prefix": "USER_STORAGE_",
        "case_sensitive": False,
    }


settings = Settings()
