"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "Oxygen Salesforce Proxy"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # CORS origin of the marketing site
    frontend_url: str = "http://localhost:3000"

    # Salesforce connected app
    salesforce_client_id: str = ""
    salesforce_client_secret: str = ""
    salesforce_login_url: str = "https://login.salesforce.com"

    # Refresh token flow (preferred)
    salesforce_refresh_token: str = ""

    # Password flow (fallback)
    salesforce_username: str = ""
    salesforce_password: str = ""
    salesforce_security_token: str = ""

    salesforce_api_version: str = "59.0"
    salesforce_session_ttl_minutes: int = Field(
        90,
        ge=1,
        description="Fixed lifetime applied to every issued access token",
    )
    salesforce_timeout_seconds: float = 30.0

    # Server
    host: str = "0.0.0.0"
    port: int = 3001

    @field_validator("salesforce_login_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def token_url(self) -> str:
        """OAuth 2.0 token endpoint of the configured login host."""
        return f"{self.salesforce_login_url}/services/oauth2/token"

    @property
    def has_refresh_credentials(self) -> bool:
        return bool(
            self.salesforce_client_id
            and self.salesforce_client_secret
            and self.salesforce_refresh_token
        )

    def missing_password_credentials(self) -> list[str]:
        """Return env var names required by the password flow that are unset."""
        required = {
            "SALESFORCE_CLIENT_ID": self.salesforce_client_id,
            "SALESFORCE_CLIENT_SECRET": self.salesforce_client_secret,
            "SALESFORCE_USERNAME": self.salesforce_username,
            "SALESFORCE_PASSWORD": self.salesforce_password,
        }
        return [name for name, value in required.items() if not value]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
