"""Application configuration."""

import os
from typing import List, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server settings loaded from environment variables."""

    # Application
    APP_NAME: str = "VCNotebook"
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    PORT: int = 3000

    # Identity provider (forwarded to clients)
    FIREBASE_API_KEY: Optional[str] = None
    FIREBASE_AUTH_DOMAIN: Optional[str] = None
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_STORAGE_BUCKET: Optional[str] = None
    FIREBASE_MESSAGING_SENDER_ID: Optional[str] = None
    FIREBASE_APP_ID: Optional[str] = None

    # Backend-as-a-service (forwarded to clients)
    SUPABASE_URL: Optional[str] = None
    SUPABASE_ANON_KEY: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None
    # The privileged key bypasses row-level security; only forward it when asked to
    FORWARD_SERVICE_ROLE_KEY: bool = False

    # Analytics
    GA_MEASUREMENT_ID: Optional[str] = None

    # Payments
    DODO_PAYMENTS_API_KEY: Optional[str] = None
    DODO_PAYMENTS_BASE_URL: str = "https://test.dodopayments.com"
    DODO_WEBHOOK_SECRET: Optional[str] = None
    PRODUCT_ID: Optional[str] = None
    WEBHOOK_TOLERANCE_SECONDS: int = 300

    # Database - the Supabase Postgres instance backing user_subscriptions
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "postgres"

    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_RECYCLE: int = 3600

    @property
    def DATABASE_URL(self) -> str:
        """Build async database URL. Uses DATABASE_URL env var if set."""
        external = os.environ.get("DATABASE_URL", "")
        if external:
            if external.startswith("postgresql://"):
                return external.replace("postgresql://", "postgresql+asyncpg://", 1)
            return external
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # Rate limiting storage: "memory://" or a redis:// URL
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 120

    # CORS
    # Override with comma-separated env var: CORS_ORIGINS=https://mysite.com,https://www.mysite.com
    CORS_ORIGINS: Union[str, List[str]] = "http://localhost:3000,http://127.0.0.1:3000"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    CORS_ALLOWED_METHODS: List[str] = ["GET", "POST", "OPTIONS"]
    CORS_ALLOWED_HEADERS: List[str] = [
        "Authorization",
        "Content-Type",
        "Accept",
        "Origin",
        "webhook-id",
        "webhook-timestamp",
        "webhook-signature",
    ]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def payments_enabled(self) -> bool:
        """Check if the checkout flow can reach the payment provider."""
        return bool(self.DODO_PAYMENTS_API_KEY and self.PRODUCT_ID)

    @property
    def webhook_verification_enabled(self) -> bool:
        """Webhook signatures are only checked when a secret is configured."""
        return bool(self.DODO_WEBHOOK_SECRET)

    @property
    def analytics_enabled(self) -> bool:
        return bool(self.GA_MEASUREMENT_ID)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.APP_ENV == "production" and not self.DEBUG

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


class ClientSettings(BaseSettings):
    """Settings for the client core (note sync, attachments, premium)."""

    API_BASE_URL: str = "http://localhost:3000"
    LOCAL_STORE_DIR: str = "~/.vcnotebook"
    NOTES_TABLE: str = "notes"
    ATTACHMENTS_TABLE: str = "file_attachments"
    STORAGE_BUCKET: str = "note-attachments"
    SEARCH_COLUMN: str = "title_content_fts"
    MAX_FILE_UPLOAD_SIZE: int = 50 * 1024 * 1024
    SIGNED_URL_EXPIRES_IN: int = 3600
    HTTP_TIMEOUT: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix="VCNOTEBOOK_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
