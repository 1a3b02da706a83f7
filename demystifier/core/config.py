"""Application configuration."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI
    OPENAI_API_KEY: str = ""
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_MAX_CHARS: int = 200000
    LLM_TEMPERATURE: float = 0.1
    LLM_TIMEOUT_S: int = 60
    LLM_MAX_RETRIES: int = 3
    LLM_RETRY_WAIT_S: float = 1.0

    # Analysis
    BATCH_FAILURE_POLICY: Literal["isolate", "fail_together"] = "isolate"

    # Calendar export
    CALENDAR_PRODUCT: str = "LegalDemystifier"
    CALENDAR_UID_DOMAIN: str = "legal-demystifier.app"
    REMINDER_WINDOW_DAYS: int = 30

    # Application
    APP_NAME: str = "Legal Demystifier"
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    MAX_FILE_SIZE_MB: int = 25

    # PDF Parsing
    PDF_MAX_PAGES: int = 100

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


# Global settings instance
settings = Settings()
