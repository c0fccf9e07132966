"""Wiring: build the numbering and order-intake services from settings."""
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .config import Settings
from .errors import TranscriptionError
from .llm.factory import build_order_parsing_client
from .models.orders import ParsedOrderResult
from .numbering.generator import SequenceGenerator
from .numbering.store import SqlSequenceStore
from .ordering.extraction import LLMOrderExtractor
from .ordering.interpreter import OrderTextInterpreter
from .ordering.transcription import WhisperTranscriber
from .prompts.registry import PromptRegistry
from .storage.repositories import ProductRepo


def build_interpreter(settings: Settings) -> OrderTextInterpreter:
    """Interpreter over the configured LLM; without credentials every parse degrades."""
    client = build_order_parsing_client(settings)
    extractor = None
    if client is not None:
        extractor = LLMOrderExtractor(client, PromptRegistry(), temperature=settings.llm_temperature)
    return OrderTextInterpreter(
        extractor,
        similarity_threshold=settings.similarity_threshold,
        timeout=settings.extraction_timeout,
    )


def build_transcriber(settings: Settings) -> WhisperTranscriber | None:
    api_key = settings.openai_api_key.get_secret_value()
    if not api_key:
        return None
    return WhisperTranscriber(
        api_key=api_key,
        model=settings.transcription_model,
        language=settings.transcription_language,
        timeout=settings.llm_timeout,
    )


def build_sequence_generator(session_factory: async_sessionmaker[AsyncSession]) -> SequenceGenerator:
    return SequenceGenerator(SqlSequenceStore(session_factory))


class OrderIntakeService:
    """Loads the catalog snapshot and runs the interpreter on a message."""

    def __init__(
        self,
        interpreter: OrderTextInterpreter,
        session_factory: async_sessionmaker[AsyncSession],
        transcriber: WhisperTranscriber | None = None,
    ):
        self.interpreter = interpreter
        self.transcriber = transcriber
        self._session_factory = session_factory

    async def parse_text(self, text: str, image: bytes | str | None = None) -> ParsedOrderResult:
        async with self._session_factory() as session:
            catalog = await ProductRepo(session).list_available()
        return await self.interpreter.parse(text, catalog, image)

    async def parse_audio(self, audio_bytes: bytes, filename: str) -> tuple[str, ParsedOrderResult]:
        """Transcribe a voice note, then parse the transcription.

        Raises ``TranscriptionError``; a failed parse still degrades.
        """
        if self.transcriber is None:
            raise TranscriptionError("Audio transcription is not configured")
        transcription = await self.transcriber.transcribe(audio_bytes, filename)
        return transcription, await self.parse_text(transcription)
