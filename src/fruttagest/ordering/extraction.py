"""Order extraction: ask a language model to read an order message."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import structlog
from pydantic import ValidationError

from ..errors import ExtractionError
from ..llm.base import DataUri, LLMClient
from ..llm.response_parser import extract_json_from_response
from ..models.orders import RawExtraction
from ..prompts.registry import PromptRegistry

logger = structlog.get_logger(__name__)

SYSTEM_TEMPLATE = "order_parsing_system"
USER_TEMPLATE = "order_parsing_user"
NO_TEXT_PLACEHOLDER = "Nessun testo fornito, analizza l'immagine."


class OrderExtractor(ABC):
    """Turns free text (and an optional photo) into raw order lines."""

    @abstractmethod
    async def extract(
        self,
        text: str,
        image: DataUri | None,
        context_names: Sequence[str],
    ) -> RawExtraction:
        """Read the order.

        *image* is a base64 data URI; *context_names* are the catalog
        product names the model should prefer. Raises ``ExtractionError``
        when the model is unreachable or its answer is unusable.
        """
        ...


class LLMOrderExtractor(OrderExtractor):
    """Extractor backed by an ``LLMClient`` and the order-parsing prompt."""

    def __init__(
        self,
        llm_client: LLMClient,
        prompt_registry: PromptRegistry | None = None,
        *,
        temperature: float = 0.0,
        max_tokens: int = 2048,
    ):
        self._llm = llm_client
        self._prompts = prompt_registry or PromptRegistry()
        self._temperature = temperature
        self._max_tokens = max_tokens

    def build_prompts(self, text: str, context_names: Sequence[str]) -> tuple[str, str]:
        system_prompt = self._prompts.render(SYSTEM_TEMPLATE)
        user_prompt = self._prompts.render(USER_TEMPLATE, variables={
            "catalog_names": ", ".join(context_names),
            "order_text": text.strip() or NO_TEXT_PLACEHOLDER,
        })
        return system_prompt, user_prompt

    async def extract(
        self,
        text: str,
        image: DataUri | None,
        context_names: Sequence[str],
    ) -> RawExtraction:
        system_prompt, user_prompt = self.build_prompts(text, context_names)

        try:
            if image:
                response = await self._llm.complete_vision(
                    system_prompt, user_prompt, [image],
                    temperature=self._temperature, max_tokens=self._max_tokens, json_mode=True,
                )
            else:
                response = await self._llm.complete_text(
                    system_prompt, user_prompt,
                    temperature=self._temperature, max_tokens=self._max_tokens, json_mode=True,
                )
        except Exception as e:
            raise ExtractionError(f"Extraction model call failed: {e}") from e

        logger.debug(
            "order_extraction_response",
            model=response.model,
            prompt_version=self._prompts.get_version(SYSTEM_TEMPLATE),
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            latency_ms=response.latency_ms,
        )

        if not response.content.strip():
            raise ExtractionError("Extraction model returned an empty answer")

        try:
            data = extract_json_from_response(response.content)
            return RawExtraction.model_validate(data)
        except (ValueError, ValidationError) as e:
            raise ExtractionError(f"Unusable extraction output: {e}") from e
