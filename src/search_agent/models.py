"""
Model Provider Factory

Creates the Strands model instance backing every language-model capability.
"""

from botocore.config import Config as BotocoreConfig
from strands.models.bedrock import BedrockModel
from strands.models.model import Model
from strands.models.ollama import OllamaModel

from .settings import Settings, get_settings


class ModelFactory:
    """Factory for creating model instances based on configuration."""

    @staticmethod
    def create_model(
        settings: Settings | None = None,
        max_tokens: int | None = None,
        **kwargs,
    ) -> Model:
        """
        Create a model instance based on configuration.

        Args:
            settings: Settings to read the provider from (defaults to the cached settings)
            max_tokens: Maximum tokens for generation
            **kwargs: Additional model-specific parameters

        Returns:
            Configured model instance
        """
        settings = settings or get_settings()

        if settings.model_type == "ollama":
            return ModelFactory._create_ollama_model(settings, **kwargs)
        return ModelFactory._create_bedrock_model(settings, max_tokens, **kwargs)

    @staticmethod
    def _create_ollama_model(settings: Settings, **kwargs) -> OllamaModel:
        """Create an Ollama model instance."""
        config = {
            "host": settings.ollama_host,
            "model_id": settings.ollama_model,
            "temperature": settings.model_temperature,
        }
        config.update(kwargs)
        return OllamaModel(**config)  # type: ignore[arg-type]

    @staticmethod
    def _create_bedrock_model(
        settings: Settings,
        max_tokens: int | None = None,
        **kwargs,
    ) -> BedrockModel:
        """Create a Bedrock model instance with retry config."""
        model_id = settings.bedrock_model

        # Claude 3.5 Sonnet has 8192 output token limit
        if max_tokens is None:
            max_tokens = 8000 if "claude-3-5-sonnet" in model_id else 10000

        # Adaptive retry mode: exponential backoff with jitter for throttling
        boto_config = BotocoreConfig(
            retries={
                "max_attempts": 10,
                "mode": "adaptive",
            },
            connect_timeout=30,
            read_timeout=120,
        )

        config = {
            "model_id": model_id,
            "temperature": settings.model_temperature,
            "max_tokens": max_tokens,
            # Answers are consumed as they stream
            "streaming": True,
            "boto_client_config": boto_config,
        }
        config.update(kwargs)
        return BedrockModel(**config)  # type: ignore[arg-type]


def create_model(settings: Settings | None = None, **kwargs) -> Model:
    """Convenience function to create a model using the factory."""
    return ModelFactory.create_model(settings, **kwargs)
