"""Configuration management for Jira MCP."""

import os
import re
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env" if os.getenv("ENVIRONMENT") != "test" else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Jira MCP"
    app_version: str = "0.1.0"
    debug: bool = Field(default=False)
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Atlassian credentials (basic auth with an API token)
    atlassian_site_name: Optional[str] = Field(
        default=None,
        description="Site name, e.g. 'mycompany' for mycompany.atlassian.net",
    )
    atlassian_user_email: Optional[str] = Field(default=None)
    atlassian_api_token: Optional[str] = Field(default=None)

    # HTTP transport
    jira_http_timeout: float = Field(default=30.0, gt=0)
    jira_max_retries: int = Field(default=3, ge=0)

    @field_validator("atlassian_site_name", mode="before")
    @classmethod
    def normalize_site_name(cls, v):
        # Accept "https://acme.atlassian.net/" as well as "acme"
        if not v:
            return None
        site = str(v).strip().lower()
        site = re.sub(r"^https?://", "", site)
        site = site.rstrip("/")
        if site.endswith(".atlassian.net"):
            site = site[: -len(".atlassian.net")]
        return site or None

    def has_credentials(self) -> bool:
        """Whether all three Atlassian credential values are present."""
        return bool(
            self.atlassian_site_name
            and self.atlassian_user_email
            and self.atlassian_api_token
        )

    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level.upper()


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
