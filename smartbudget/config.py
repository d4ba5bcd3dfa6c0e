"""
Application configuration using Pydantic settings.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # App
    app_name: str = "SmartBudget"
    log_level: str = "INFO"

    # Persistence
    data_dir: str = "./data"

    # AI assistant (any litellm model string)
    ai_model: str = "gemini/gemini-2.5-flash"
    api_key: Optional[str] = None  # assistant is disabled without it
    ai_temperature: float = 0.2
    ai_max_tokens: int = 1000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()