"""Order parsing routes: paste a message, attach a photo or a voice note."""
from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from pydantic import BaseModel

from ...errors import TranscriptionError
from ...numbering.store import TRANSIENT_STORE_ERRORS
from ...services import OrderIntakeService
from ..dependencies import get_order_intake

logger = structlog.get_logger(__name__)

router = APIRouter()


class ParseOrderRequest(BaseModel):
    text: str = ""
    image: str | None = None  # data:image/jpeg;base64,...


@router.post("/parse")
async def parse_order(
    payload: ParseOrderRequest,
    intake: OrderIntakeService = Depends(get_order_intake),
):
    """Parse a pasted order message (and optional photo) into order lines.

    Extraction problems do not fail the request: the response then has no
    items and echoes the original text.
    """
    if not payload.text.strip() and not payload.image:
        raise HTTPException(status_code=400, detail="Text or image is required")

    try:
        result = await intake.parse_text(payload.text, payload.image)
    except TRANSIENT_STORE_ERRORS as e:
        logger.error("catalog_unavailable", error=str(e))
        raise HTTPException(status_code=503, detail="Product catalog unavailable") from e

    return {"success": True, "data": result.model_dump(mode="json")}


@router.post("/parse-audio")
async def parse_order_audio(
    request: Request,
    file: UploadFile = File(...),
    intake: OrderIntakeService = Depends(get_order_intake),
):
    """Transcribe a voice note and parse the transcription."""
    audio_bytes = await file.read()
    if len(audio_bytes) == 0:
        raise HTTPException(status_code=400, detail="Empty file")

    max_bytes = request.app.state.settings.max_upload_bytes
    if len(audio_bytes) > max_bytes:
        raise HTTPException(status_code=400, detail=f"File too large (max {max_bytes // (1024 * 1024)}MB)")

    try:
        transcription, result = await intake.parse_audio(audio_bytes, file.filename or "audio.ogg")
    except TranscriptionError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except TRANSIENT_STORE_ERRORS as e:
        logger.error("catalog_unavailable", error=str(e))
        raise HTTPException(status_code=503, detail="Product catalog unavailable") from e

    return {"success": True, "transcription": transcription, "data": result.model_dump(mode="json")}
