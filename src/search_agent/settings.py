"""
Application Settings

Centralized configuration using Pydantic Settings for type safety and validation.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation and type safety."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Required settings
    brave_api_key: str

    # Page reader settings
    reader: Literal["jina", "direct"] = "jina"
    jina_api_key: str = ""
    fetch_timeout: float = 30.0

    # Search settings
    search_timeout: float = 300.0
    search_max_retries: int = 5

    # Agent settings
    agent_mode: Literal["pipeline", "tools"] = "pipeline"
    # Unset means the pipeline keeps searching until the judge decides to answer
    max_rounds: int | None = Field(default=None, ge=1)

    # Model settings
    model_type: Literal["ollama", "bedrock"] = "bedrock"
    model_temperature: float = 0.0

    # Bedrock settings
    bedrock_model: str = "us.anthropic.claude-sonnet-4-20250514-v1:0"

    # Ollama settings
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "gpt-oss:20b"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore
