"""Voice-note transcription with OpenAI Whisper."""
from __future__ import annotations

import time

import openai
import structlog

from ..errors import TranscriptionError

logger = structlog.get_logger(__name__)


class WhisperTranscriber:
    """Transcribes audio orders so they can be parsed like text messages."""

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        language: str = "it",
        timeout: int = 60,
        client: openai.AsyncOpenAI | None = None,
    ):
        self._model = model
        self._language = language
        self._client = client or openai.AsyncOpenAI(api_key=api_key, timeout=float(timeout))

    async def transcribe(self, audio_bytes: bytes, filename: str) -> str:
        """Return the plain-text transcription of *audio_bytes*.

        *filename* must carry the audio extension (``.ogg``, ``.mp3``, ...)
        because the API infers the format from it.
        """
        if not audio_bytes:
            raise TranscriptionError("Empty audio file")

        start = time.monotonic()
        try:
            transcription = await self._client.audio.transcriptions.create(
                file=(filename, audio_bytes),
                model=self._model,
                language=self._language,
                response_format="text",
            )
        except openai.OpenAIError as e:
            logger.error("transcription_failed", filename=filename, error=str(e), model=self._model)
            raise TranscriptionError(f"Transcription failed: {e}") from e

        # response_format="text" yields a plain string
        text = transcription if isinstance(transcription, str) else transcription.text
        logger.info(
            "transcription_complete",
            filename=filename,
            chars=len(text),
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        return text.strip()
