"""Configuration settings using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal
from uuid import UUID

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str

    environment: Literal["development", "production"] = "development"
    api_docs_enabled: bool | None = None
    metrics_token: str | None = None

    # Acting user resolution
    jwt_secret: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    default_acting_user_id: UUID | None = None
    owner_role_slug: str = "owner"

    # CORS
    cors_allow_origins: list[str] = ["http://localhost:5173"]
    cors_allow_methods: list[str] = ["GET", "POST", "PATCH", "DELETE", "OPTIONS"]
    cors_allow_headers: list[str] = [
        "Accept",
        "Authorization",
        "Content-Type",
        "X-Request-ID",
        "X-User-Id",
        "X-Metrics-Token",
    ]
    cors_allow_credentials: bool = True

    @field_validator(
        "cors_allow_origins",
        "cors_allow_methods",
        "cors_allow_headers",
        mode="before",
    )
    @classmethod
    def _parse_csv_lists(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    # Organization listing
    organizations_page_size_default: int = 20
    organizations_page_size_max: int = 50

    # MinIO/S3 Storage (title cards)
    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_bucket: str = "org-tiles"
    minio_use_ssl: bool = False
    storage_public_base_url: str | None = None

    # Title card generation
    title_card_enabled: bool = True
    title_card_api_url: str = "https://api.openai.com/v1/images/generations"
    title_card_api_key: str | None = None
    title_card_model: str = "dall-e-2"
    title_card_size: str = "1024x1024"
    title_card_timeout_seconds: float = 60.0

    # Best-effort side effects (owner role, title card)
    side_effect_max_attempts: int = 3
    side_effect_backoff_seconds: float = 0.5
    side_effect_backoff_max_seconds: float = 5.0

    @model_validator(mode="after")
    def _validate_production_settings(self) -> Settings:
        if self.side_effect_max_attempts < 1:
            raise ValueError("SIDE_EFFECT_MAX_ATTEMPTS must be at least 1")

        if self.environment != "production":
            return self

        insecure_jwt_secrets = {
            "dev-secret-change-in-production",
            "change-me",
            "changeme",
        }
        if self.jwt_secret in insecure_jwt_secrets or len(self.jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be a strong secret in production")

        if self.minio_access_key == "minioadmin" or self.minio_secret_key == "minioadmin":
            raise ValueError("MINIO_ACCESS_KEY/MINIO_SECRET_KEY must be set in production")

        if any(x == "*" for x in self.cors_allow_origins):
            raise ValueError("CORS_ALLOW_ORIGINS cannot contain '*' in production")
        if any(x == "*" for x in self.cors_allow_methods):
            raise ValueError("CORS_ALLOW_METHODS cannot contain '*' in production")
        if any(x == "*" for x in self.cors_allow_headers):
            raise ValueError("CORS_ALLOW_HEADERS cannot contain '*' in production")

        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
