"""
Environment configuration and constants.
"""
from typing import Optional
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file at module import time
load_dotenv()

SLASH_COMMAND = "/clawcraft"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_title: str = "ClawCraft QA"
    api_version: str = "0.1.0"
    port: int = 3000

    # Slack Configuration
    slack_bot_token: Optional[str] = None
    slack_signing_secret: Optional[str] = None
    slack_api_base_url: str = "https://slack.com/api"

    # Jira Configuration
    jira_base_url: Optional[str] = None
    jira_email: Optional[str] = None
    jira_api_token: Optional[str] = None

    # OpenAI Configuration
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4.1"

    # Application Configuration
    log_level: str = "INFO"


# Global settings instance
settings = Settings()
