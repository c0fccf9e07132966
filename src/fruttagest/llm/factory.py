"""Build the LLM client used for order parsing from settings."""
from __future__ import annotations

import structlog

from ..config import Settings
from .anthropic_client import AnthropicClient
from .base import LLMClient
from .failover import FailoverLLMClient
from .openai_client import OpenAIClient

logger = structlog.get_logger(__name__)


def build_order_parsing_client(settings: Settings) -> LLMClient | None:
    """Return the configured client, or None when no credentials are set.

    With an Azure AI endpoint, Claude reads the orders and (if enabled)
    GPT-4o on Azure OpenAI is the fallback. Otherwise Azure OpenAI is used
    alone.
    """
    azure_ai_key = settings.azure_ai_api_key.get_secret_value()
    azure_ai_endpoint = settings.azure_ai_endpoint
    azure_openai_key = settings.azure_openai_api_key.get_secret_value()
    azure_openai_endpoint = settings.azure_openai_endpoint

    has_azure_ai = bool(azure_ai_endpoint and azure_ai_key)

    openai_client: LLMClient | None = None
    if azure_openai_key and azure_openai_endpoint:
        openai_client = OpenAIClient(
            api_key=azure_openai_key,
            model=settings.order_parsing_fallback_model if has_azure_ai else settings.order_parsing_model,
            azure_endpoint=azure_openai_endpoint,
            timeout=settings.llm_timeout,
        )

    if has_azure_ai:
        logger.info("llm_init", mode="azure_ai_claude", model=settings.order_parsing_model)
        primary: LLMClient = AnthropicClient(
            api_key=azure_ai_key,
            model=settings.order_parsing_model,
            azure_endpoint=azure_ai_endpoint,
            timeout=settings.llm_timeout,
        )
        if settings.enable_failover and openai_client is not None:
            return FailoverLLMClient(primary, openai_client)
        return primary

    if openai_client is not None:
        logger.info("llm_init", mode="azure_openai_only", model=settings.order_parsing_model)
        return openai_client

    logger.warning("llm_not_configured")
    return None
