"""Failover LLM client that tries primary then falls back."""
from __future__ import annotations
import structlog
from .base import LLMClient, LLMResponse

logger = structlog.get_logger(__name__)


class FailoverLLMClient(LLMClient):
    """Wraps two LLM clients. Tries primary; on failure falls back to secondary.

    An error from the fallback propagates to the caller.
    """

    def __init__(self, primary: LLMClient, fallback: LLMClient):
        self._primary = primary
        self._fallback = fallback
        self._failover_count = 0

    async def complete_text(self, system_prompt, user_prompt, *, temperature=0.0, max_tokens=2048, json_mode=False) -> LLMResponse:
        kwargs = dict(temperature=temperature, max_tokens=max_tokens, json_mode=json_mode)
        try:
            return await self._primary.complete_text(system_prompt, user_prompt, **kwargs)
        except Exception as e:
            self._record_failover("primary_llm_failed", e)
            return await self._fallback.complete_text(system_prompt, user_prompt, **kwargs)

    async def complete_vision(self, system_prompt, user_prompt, images, *, temperature=0.0, max_tokens=2048, json_mode=False) -> LLMResponse:
        kwargs = dict(temperature=temperature, max_tokens=max_tokens, json_mode=json_mode)
        try:
            return await self._primary.complete_vision(system_prompt, user_prompt, images, **kwargs)
        except Exception as e:
            self._record_failover("primary_llm_vision_failed", e)
            return await self._fallback.complete_vision(system_prompt, user_prompt, images, **kwargs)

    def get_model_name(self) -> str:
        return f"{self._primary.get_model_name()} (failover: {self._fallback.get_model_name()})"

    @property
    def failover_count(self) -> int:
        return self._failover_count

    def _record_failover(self, event: str, error: Exception) -> None:
        logger.warning(
            event,
            error=str(error),
            model=self._primary.get_model_name(),
            fallback=self._fallback.get_model_name(),
        )
        self._failover_count += 1
