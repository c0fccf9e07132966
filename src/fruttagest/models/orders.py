"""Order parsing models.

``RawExtraction`` mirrors the JSON the extraction model is asked to return
(camelCase keys); ``ParsedOrderResult`` is what callers receive once every
line has been resolved against the catalog.
"""

from __future__ import annotations

import math

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field, field_validator

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Units of measure
# ---------------------------------------------------------------------------

UNIT_CODES = ("KG", "G", "PEZZI", "CASSETTA", "MAZZO", "GRAPPOLO", "VASETTO", "SACCHETTO")

UNIT_SYNONYMS: dict[str, str] = {
    "kg": "KG", "chili": "KG", "chilo": "KG", "chilogrammi": "KG", "chilogrammo": "KG",
    "g": "G", "gr": "G", "grammi": "G", "grammo": "G",
    "pezzi": "PEZZI", "pezzo": "PEZZI", "pz": "PEZZI", "unità": "PEZZI",
    "cassetta": "CASSETTA", "cassette": "CASSETTA", "cassa": "CASSETTA", "casse": "CASSETTA",
    "mazzo": "MAZZO", "mazzi": "MAZZO",
    "grappolo": "GRAPPOLO", "grappoli": "GRAPPOLO",
    "vasetto": "VASETTO", "vasetti": "VASETTO",
    "sacchetto": "SACCHETTO", "sacchetti": "SACCHETTO",
}

_NULL_STRINGS = {"", "null", "none", "n/a"}


def normalize_unit(value: str | None) -> str | None:
    """Map Italian unit words to unit codes; unknown strings pass through."""
    if value is None:
        return None
    cleaned = value.strip()
    if cleaned.lower() in _NULL_STRINGS:
        return None
    if cleaned.upper() in UNIT_CODES:
        return cleaned.upper()
    return UNIT_SYNONYMS.get(cleaned.lower(), cleaned)


def _null_to_none(value):
    if isinstance(value, str) and value.strip().lower() in _NULL_STRINGS:
        return None
    return value


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class CatalogEntry(BaseModel):
    """A product eligible for matching, as supplied by the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    unit: str = "KG"
    is_available: bool = True


# ---------------------------------------------------------------------------
# Extraction output
# ---------------------------------------------------------------------------


class RawOrderItem(BaseModel):
    """One order line as read by the extraction model, before matching."""

    model_config = ConfigDict(populate_by_name=True)

    product_name: str = Field(alias="productName", min_length=1)
    quantity: float | None = None
    unit: str | None = None

    @field_validator("product_name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("quantity", mode="before")
    @classmethod
    def _parse_quantity(cls, v):
        v = _null_to_none(v)
        if v is None:
            return None
        try:
            # Italian decimal comma: "1,5" kg
            quantity = float(v.strip().replace(",", ".")) if isinstance(v, str) else float(v)
        except (TypeError, ValueError):
            quantity = math.nan
        if not math.isfinite(quantity):
            # "un paio", "q.b.": the line is kept and falls back to the default quantity
            logger.warning("order_quantity_unreadable", quantity=str(v))
            return None
        return quantity

    @field_validator("unit", mode="before")
    @classmethod
    def _normalize_unit(cls, v):
        return normalize_unit(v) if isinstance(v, str) else v


class RawExtraction(BaseModel):
    """Everything the extraction model returned for one message."""

    model_config = ConfigDict(populate_by_name=True)

    items: list[RawOrderItem] = Field(default_factory=list)
    customer_name: str | None = Field(default=None, alias="customerName")
    delivery_date: str | None = Field(default=None, alias="deliveryDate")
    notes: str | None = None

    @field_validator("items", mode="before")
    @classmethod
    def _validate_each_item(cls, v):
        if v is None:
            return []
        if not isinstance(v, list):
            return v
        items = []
        for index, raw in enumerate(v):
            try:
                items.append(RawOrderItem.model_validate(raw))
            except ValidationError as e:
                logger.warning("order_item_dropped", index=index, error=str(e))
        return items

    @field_validator("customer_name", "notes", mode="before")
    @classmethod
    def _null_text(cls, v):
        v = _null_to_none(v)
        return v.strip() if isinstance(v, str) else v

    @field_validator("delivery_date", mode="before")
    @classmethod
    def _keep_date_text(cls, v):
        # Kept as written ("22/10/2026", "domani"); resolving it is up to the operator
        v = _null_to_none(v)
        return v if v is None or isinstance(v, str) else str(v)


# ---------------------------------------------------------------------------
# Parse result
# ---------------------------------------------------------------------------


class ParsedOrderItem(BaseModel):
    """An order line after catalog resolution.

    ``matched`` is the only confidence signal: any tier (exact, substring,
    similarity) counts as a match.
    """

    product_name: str
    product_id: str | None = None
    quantity: int | float = 1
    unit: str | None = None
    matched: bool = False

    @field_validator("quantity")
    @classmethod
    def _whole_quantity(cls, v):
        return int(v) if float(v).is_integer() else v

    @computed_field
    @property
    def confidence(self) -> float:
        return 1.0 if self.matched else 0.5


class ParsedOrderResult(BaseModel):
    """Structured order with the original text kept for the operator."""

    items: list[ParsedOrderItem] = Field(default_factory=list)
    customer_name: str | None = None
    delivery_date: str | None = None  # as written by the extraction model
    notes: str | None = None
    raw_text: str
    extraction_failed: bool = False

    @property
    def unmatched_items(self) -> list[ParsedOrderItem]:
        return [item for item in self.items if not item.matched]

    @classmethod
    def degraded(cls, raw_text: str) -> ParsedOrderResult:
        """Empty result used when extraction could not be completed."""
        return cls(items=[], raw_text=raw_text, extraction_failed=True)
