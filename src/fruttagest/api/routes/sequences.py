"""Document numbering routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from ...errors import RetryableStoreError
from ...models.sequences import DocumentType
from ...numbering.generator import SequenceGenerator
from ..dependencies import get_sequence_generator

router = APIRouter()


@router.post("/{document_type}/next")
async def next_document_number(
    document_type: DocumentType,
    generator: SequenceGenerator = Depends(get_sequence_generator),
):
    """Issue the next number for *document_type*, e.g. ``ORD-2026-0007``."""
    try:
        number = await generator.next_number(document_type)
    except RetryableStoreError as e:
        raise HTTPException(status_code=503, detail=str(e), headers={"Retry-After": "1"}) from e
    return {"document_type": document_type.value, "number": number}


@router.get("/{document_type}")
async def current_document_number(
    document_type: DocumentType,
    generator: SequenceGenerator = Depends(get_sequence_generator),
):
    """Last counter issued this year (0 if none), without issuing a number."""
    try:
        last_number = await generator.current_number(document_type)
    except RetryableStoreError as e:
        raise HTTPException(status_code=503, detail=str(e), headers={"Retry-After": "1"}) from e
    return {
        "document_type": document_type.value,
        "prefix": document_type.prefix,
        "last_number": last_number,
    }
