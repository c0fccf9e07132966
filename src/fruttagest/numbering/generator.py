"""Sequential document numbers: ORD-2026-0001, DDT-2026-0042, ..."""
from __future__ import annotations

from collections.abc import Callable
from datetime import date

import structlog

from ..models.sequences import DocumentType, SequenceKey, format_document_number
from .store import SequenceStore

logger = structlog.get_logger(__name__)


class SequenceGenerator:
    """Issues the next number for a document type in the current year.

    Holds no counters itself; every call goes to the store, so several
    processes can share one store safely.
    """

    def __init__(self, store: SequenceStore, today: Callable[[], date] = date.today):
        self._store = store
        self._today = today

    async def next_number(self, document_type: DocumentType | str) -> str:
        """Return ``PREFIX-YEAR-NNNN`` once the incremented counter is committed.

        Raises ``RetryableStoreError`` (from the store) when the increment
        could not be committed; no number is issued in that case.
        """
        document_type = DocumentType(document_type)
        key = SequenceKey(document_type=document_type, year=self._today().year)
        value = await self._store.increment_and_get(key)
        number = format_document_number(document_type, key.year, value)
        logger.info("sequence_issued", document_type=document_type.value, year=key.year, number=number)
        return number

    async def current_number(self, document_type: DocumentType | str) -> int:
        """Last issued counter for this year, without issuing a new one."""
        document_type = DocumentType(document_type)
        return await self._store.peek(SequenceKey(document_type=document_type, year=self._today().year))
