"""OpenAI LLM client for Azure OpenAI deployments."""
from __future__ import annotations

import asyncio
import time

import openai
import structlog

from .base import DataUri, LLMClient, LLMResponse

logger = structlog.get_logger(__name__)

# Default retry configuration
MAX_RETRIES = 3
RETRY_DELAYS = [1.0, 2.0, 4.0]

# Exceptions that are retryable
RETRYABLE_EXCEPTIONS = (
    openai.RateLimitError,
    openai.APIConnectionError,
    openai.InternalServerError,
)


class OpenAIClient(LLMClient):
    """LLM client for GPT models deployed via Azure OpenAI Service.

    ``azure_endpoint`` and ``api_key`` point to an Azure OpenAI resource and
    ``model`` is the deployment name.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        azure_endpoint: str = "",
        timeout: int = 60,
    ):
        self._model = model
        self._timeout = timeout

        if not azure_endpoint:
            raise ValueError(
                "azure_endpoint is required: GPT models must be accessed "
                "via Azure OpenAI Service."
            )

        self._client = openai.AsyncAzureOpenAI(
            api_key=api_key,
            azure_endpoint=azure_endpoint,
            api_version="2024-06-01",
            timeout=float(timeout),
        )

    async def complete_text(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.0,
        max_tokens: int = 2048,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Text-only completion using the Chat Completions API."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        return await self._call_with_retry(messages, temperature, max_tokens, json_mode)

    async def complete_vision(
        self,
        system_prompt: str,
        user_prompt: str,
        images: list[DataUri],
        *,
        temperature: float = 0.0,
        max_tokens: int = 2048,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Completion over the prompt and data-URI images."""
        user_content: list[dict] = [{"type": "text", "text": user_prompt}]
        for data_uri in images:
            user_content.append({
                "type": "image_url",
                "image_url": {"url": data_uri, "detail": "high"},
            })

        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_content},
        ]
        return await self._call_with_retry(messages, temperature, max_tokens, json_mode)

    def get_model_name(self) -> str:
        """Return the model name being used."""
        return f"{self._model} (azure_openai)"

    async def _call_with_retry(
        self,
        messages: list[dict],
        temperature: float,
        max_tokens: int,
        json_mode: bool,
    ) -> LLMResponse:
        """Call the Azure OpenAI API with exponential backoff retries."""
        kwargs: dict = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        last_exception: Exception | None = None
        for attempt in range(MAX_RETRIES + 1):
            try:
                start = time.monotonic()
                response = await self._client.chat.completions.create(
                    model=self._model,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                    **kwargs,
                )
                elapsed_ms = int((time.monotonic() - start) * 1000)

                choice = response.choices[0]
                usage = response.usage
                return LLMResponse(
                    content=choice.message.content or "",
                    model=response.model or self._model,
                    input_tokens=usage.prompt_tokens if usage else 0,
                    output_tokens=usage.completion_tokens if usage else 0,
                    finish_reason=choice.finish_reason or "",
                    latency_ms=elapsed_ms,
                )

            except RETRYABLE_EXCEPTIONS as exc:
                last_exception = exc
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[attempt]
                    logger.warning(
                        "azure_openai_api_retry",
                        attempt=attempt + 1,
                        delay=delay,
                        error=str(exc),
                        model=self._model,
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(
                        "azure_openai_api_exhausted_retries",
                        attempts=MAX_RETRIES + 1,
                        error=str(exc),
                        model=self._model,
                    )

        raise last_exception  # type: ignore[misc]
