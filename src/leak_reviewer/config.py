"""Application settings loaded from the environment."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .orchestrator import DEFAULT_STATUS_CONTEXT


class Settings(BaseSettings):
    """Runtime configuration. Values come from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # GitHub
    github_token: str = Field(min_length=1)
    webhook_secret: str = Field(min_length=1)
    github_api_url: str = "https://api.github.com"
    status_context: str = DEFAULT_STATUS_CONTEXT

    # Slack
    slack_token: str = Field(min_length=1)
    slack_channel: str = Field(min_length=1)

    # AI review providers, checked in this order
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None

    # Application
    environment: str = "development"
    port: int = 8080
    log_level: str = "info"

    @property
    def has_ai_provider(self) -> bool:
        return bool(self.openai_api_key or self.anthropic_api_key or self.gemini_api_key)
