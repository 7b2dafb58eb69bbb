"""LLM model factory for report summarization.

``LLM_PROVIDER=anthropic`` (default) uses Claude; ``openai`` covers OpenAI and
any OpenAI-compatible endpoint set with ``OPENAI_BASE_URL``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.openai import OpenAIProvider

from earnsight.config import get_settings
from earnsight.core.exceptions import ConfigurationError
from earnsight.core.logging import get_logger

if TYPE_CHECKING:
    from earnsight.config import Settings

logger = get_logger(__name__)


def create_model(settings: Settings | None = None) -> Model:
    """Build the summarization model from settings.

    Raises:
        ConfigurationError: the selected provider has no API key, and (for
            OpenAI) no custom base URL that might not need one
    """
    settings = settings or get_settings()
    model_name = settings.llm_model

    if settings.llm_provider == "anthropic":
        if not settings.anthropic_api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY not configured")
        logger.debug("Using Anthropic model", model=model_name)
        return AnthropicModel(
            model_name,
            provider=AnthropicProvider(api_key=settings.anthropic_api_key.get_secret_value()),
        )

    api_key = settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
    if api_key is None and not settings.openai_base_url:
        raise ConfigurationError("OPENAI_API_KEY not configured")

    # Local servers accept any key
    provider = OpenAIProvider(base_url=settings.openai_base_url, api_key=api_key or "unused")
    logger.debug(
        "Using OpenAI-compatible model",
        model=model_name,
        base_url=settings.openai_base_url,
    )
    return OpenAIChatModel(model_name, provider=provider)
