"""Application settings and configuration."""
import json
import secrets
from functools import lru_cache
from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

def _generate_dev_secret() -> str:
    """Generate a random secret for development use.

    Tokens issued with this key won't survive server restarts, which is
    acceptable in development.  Production **must** set an explicit secret
    via environment variables; the startup validator enforces this.
    """
    return secrets.token_urlsafe(32)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Herald"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    workers: int = 1

    # Database
    database_url: str = "sqlite+aiosqlite:///./herald.db"
    database_echo: bool = False
    db_pool_size: int = 10
    db_max_overflow: int = 20

    @field_validator("database_url", mode="before")
    @classmethod
    def fix_database_url(cls, v: str) -> str:
        """Auto-convert plain postgres:// URLs to postgresql+asyncpg://."""
        if isinstance(v, str):
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+asyncpg://", 1)
            if v.startswith("postgres://"):
                return v.replace("postgres://", "postgresql+asyncpg://", 1)
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    # Authentication / JWT
    jwt_secret_key: str = ""

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def fill_empty_secret(cls, v: str) -> str:
        """Generate a random secret when no value is provided."""
        if not v:
            return _generate_dev_secret()
        return v

    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60

    # CORS - stored as str to prevent pydantic-settings auto-JSON-parse failures
    cors_origins: str = "https://knowledge-herald.web.app,http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins into a list, stripping trailing slashes."""
        v = self.cors_origins.strip()
        if v.startswith("["):
            try:
                origins = json.loads(v)
                return [o.rstrip("/") for o in origins]
            except json.JSONDecodeError:
                pass
        return [origin.strip().strip("'\"").rstrip("/") for origin in v.split(",") if origin.strip()]

    # Client URL (checkout redirects)
    client_url: str = "http://localhost:5173"

    # Stripe (Payments)
    stripe_secret_key: Optional[str] = None
    stripe_api_base: str = "https://api.stripe.com/v1"
    stripe_timeout: float = 30.0
    payment_currency: str = "usd"

    # Rate limiting
    rate_limit_enabled: bool = True
    rate_limit_storage_uri: str = "memory://"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == "development"

    def validate_production_secrets(self) -> None:
        """Validate that production secrets and critical API keys are configured.

        In production/staging the app refuses to start unless an explicit,
        strong JWT secret and a Stripe key are provided.
        """
        if self.environment in ("production", "staging"):
            if len(self.jwt_secret_key) < 32:
                raise ValueError("JWT_SECRET_KEY must be set to at least 32 characters in production!")
            if not self.stripe_secret_key:
                raise ValueError("STRIPE_SECRET_KEY is required in production!")

        if self.environment == "production":
            if self.database_echo:
                raise ValueError(
                    "DATABASE_ECHO must be False in production to prevent SQL queries in logs"
                )
            if self.is_sqlite:
                import logging as _logging
                _logging.getLogger(__name__).warning(
                    "SQLite configured in production; multi-worker deployments need PostgreSQL."
                )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Validates that production/staging deployments have proper secrets
    configured; the app will refuse to start otherwise.
    """
    s = Settings()
    s.validate_production_secrets()
    return s


# Global settings instance
settings = get_settings()
