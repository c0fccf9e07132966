"""Anthropic Claude LLM client with support for Azure AI Foundry deployments."""
from __future__ import annotations

import asyncio
import time

import anthropic
import structlog

from ..utils.image import parse_data_uri
from .base import DataUri, LLMClient, LLMResponse

logger = structlog.get_logger(__name__)

MAX_RETRIES = 3
RETRY_DELAYS = [1.0, 2.0, 4.0]

RETRYABLE_EXCEPTIONS = (
    anthropic.RateLimitError,
    anthropic.APIConnectionError,
    anthropic.InternalServerError,
)

JSON_ONLY_SUFFIX = "Respond with valid JSON only."


class AnthropicClient(LLMClient):
    """LLM client for Claude models.

    When ``azure_endpoint`` is provided, the client talks to the Azure AI
    serverless deployment, which exposes an Anthropic-compatible Messages
    endpoint, instead of the Anthropic API directly.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-5-20250929",
        timeout: int = 60,
        azure_endpoint: str | None = None,
    ):
        self._model = model
        self._timeout = timeout

        if azure_endpoint:
            self._client = anthropic.AsyncAnthropic(
                api_key=api_key,
                base_url=azure_endpoint.rstrip("/"),
                timeout=float(timeout),
            )
            self._provider = "azure_ai"
        else:
            self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=float(timeout))
            self._provider = "anthropic"

    async def complete_text(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.0,
        max_tokens: int = 2048,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Text-only completion using the Messages API."""
        messages = [{"role": "user", "content": user_prompt}]
        return await self._call_with_retry(
            _with_json_hint(system_prompt, json_mode), messages, temperature, max_tokens,
        )

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
        content: list[dict] = []
        for data_uri in images:
            parsed = parse_data_uri(data_uri)
            if parsed is None:
                raise ValueError("Images must be base64 data URIs")
            media_type, data = parsed
            content.append({
                "type": "image",
                "source": {"type": "base64", "media_type": media_type, "data": data},
            })
        content.append({"type": "text", "text": user_prompt})

        messages = [{"role": "user", "content": content}]
        return await self._call_with_retry(
            _with_json_hint(system_prompt, json_mode), messages, temperature, max_tokens,
        )

    def get_model_name(self) -> str:
        """Return the model name being used."""
        return f"{self._model} ({self._provider})"

    async def _call_with_retry(
        self,
        system_prompt: str,
        messages: list[dict],
        temperature: float,
        max_tokens: int,
    ) -> LLMResponse:
        """Call the Anthropic API with exponential backoff retries."""
        last_exception: Exception | None = None

        for attempt in range(MAX_RETRIES + 1):
            try:
                start = time.monotonic()
                response = await self._client.messages.create(
                    model=self._model,
                    system=system_prompt,
                    messages=messages,
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
                elapsed_ms = int((time.monotonic() - start) * 1000)

                content_text = "".join(
                    block.text for block in response.content if block.type == "text"
                )

                return LLMResponse(
                    content=content_text,
                    model=response.model,
                    input_tokens=response.usage.input_tokens,
                    output_tokens=response.usage.output_tokens,
                    finish_reason=response.stop_reason or "",
                    latency_ms=elapsed_ms,
                )

            except RETRYABLE_EXCEPTIONS as exc:
                last_exception = exc
                if attempt < MAX_RETRIES:
                    delay = RETRY_DELAYS[attempt]
                    logger.warning(
                        "anthropic_api_retry",
                        attempt=attempt + 1,
                        delay=delay,
                        error=str(exc),
                        model=self._model,
                        provider=self._provider,
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(
                        "anthropic_api_exhausted_retries",
                        attempts=MAX_RETRIES + 1,
                        error=str(exc),
                        model=self._model,
                        provider=self._provider,
                    )

        raise last_exception  # type: ignore[misc]


def _with_json_hint(system_prompt: str, json_mode: bool) -> str:
    # Messages API has no JSON response format switch
    if json_mode and not system_prompt.rstrip().endswith(JSON_ONLY_SUFFIX):
        return system_prompt.rstrip() + "\n\n" + JSON_ONLY_SUFFIX
    return system_prompt
