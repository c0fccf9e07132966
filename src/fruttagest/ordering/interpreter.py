"""Order text interpreter: extraction followed by catalog resolution."""
from __future__ import annotations

import asyncio
from collections.abc import Sequence

import structlog

from ..models.orders import CatalogEntry, ParsedOrderResult
from ..utils.image import normalize_image_input
from .extraction import OrderExtractor
from .matching import DEFAULT_SIMILARITY_THRESHOLD, available_entries, resolve_items

logger = structlog.get_logger(__name__)


class OrderTextInterpreter:
    """Converts an order message into resolved order lines.

    ``parse`` never raises: if extraction fails for any reason the result
    has no items and still carries the original text, so the operator can
    enter the order by hand.
    """

    def __init__(
        self,
        extractor: OrderExtractor | None,
        *,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        timeout: float | None = None,
    ):
        self._extractor = extractor
        self._threshold = similarity_threshold
        self._timeout = timeout

    async def parse(
        self,
        raw_text: str,
        catalog: Sequence[CatalogEntry],
        image: bytes | str | None = None,
    ) -> ParsedOrderResult:
        """Parse *raw_text* (and optional image bytes or data URI) against *catalog*."""
        if self._extractor is None:
            logger.error("order_extraction_unavailable", reason="no extractor configured")
            return ParsedOrderResult.degraded(raw_text)

        try:
            image_uri = normalize_image_input(image)
        except ValueError as e:
            # Unreadable attachment: carry on with the text alone
            logger.warning("order_image_ignored", error=str(e))
            image_uri = None

        entries = available_entries(catalog)
        context_names = [entry.name for entry in entries]

        try:
            extraction = await asyncio.wait_for(
                self._extractor.extract(raw_text, image_uri, context_names),
                timeout=self._timeout,
            )
        except Exception as e:
            logger.warning(
                "order_extraction_failed",
                error=str(e),
                error_type=type(e).__name__,
                text_length=len(raw_text),
                has_image=image_uri is not None,
            )
            return ParsedOrderResult.degraded(raw_text)

        items = resolve_items(extraction.items, entries, self._threshold)
        result = ParsedOrderResult(
            items=items,
            customer_name=extraction.customer_name,
            delivery_date=extraction.delivery_date,
            notes=extraction.notes,
            raw_text=raw_text,
        )
        logger.info(
            "order_parsed",
            items=len(items),
            unmatched=len(result.unmatched_items),
            has_image=image_uri is not None,
        )
        return result
