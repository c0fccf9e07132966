"""Chat-model interface used to read order messages and photos."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import TypeAlias
from pydantic import BaseModel

# "data:image/jpeg;base64,/9j/4AAQ..." as produced by utils.image.normalize_image_input
DataUri: TypeAlias = str


class LLMResponse(BaseModel):
    """Raw answer of one model call, before any JSON is recovered from it."""
    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    finish_reason: str = ""
    latency_ms: int = 0


class LLMClient(ABC):
    """A chat model that can read an order as text or as photos.

    Implementations retry transient API failures themselves and raise the
    vendor's exception once retries are exhausted.
    """

    @abstractmethod
    async def complete_text(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.0,
        max_tokens: int = 2048,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Answer a pasted or transcribed order."""
        ...

    @abstractmethod
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
        """Answer an order photographed or scanned, with the user prompt as caption."""
        ...

    @abstractmethod
    def get_model_name(self) -> str:
        """Model (deployment) and provider label, used in logs."""
        ...
