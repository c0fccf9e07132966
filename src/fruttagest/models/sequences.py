"""Document types that receive a sequential, year-scoped number."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class DocumentType(StrEnum):
    ORDER = "ORDER"
    DELIVERY_NOTE = "DELIVERY_NOTE"
    INVOICE = "INVOICE"
    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"
    PURCHASE_ORDER = "PURCHASE_ORDER"
    SUPPLIER_INVOICE = "SUPPLIER_INVOICE"

    @property
    def prefix(self) -> str:
        return DOCUMENT_PREFIXES[self]


DOCUMENT_PREFIXES: dict[DocumentType, str] = {
    DocumentType.ORDER: "ORD",
    DocumentType.DELIVERY_NOTE: "DDT",
    DocumentType.INVOICE: "FT",
    DocumentType.CUSTOMER: "CLI",
    DocumentType.SUPPLIER: "FOR",
    DocumentType.PURCHASE_ORDER: "OA",
    DocumentType.SUPPLIER_INVOICE: "FT-FORN",
}

NUMBER_WIDTH = 4


class SequenceKey(BaseModel):
    """Identity of one counter: a document type within a calendar year."""

    model_config = ConfigDict(frozen=True)

    document_type: DocumentType
    year: int

    @property
    def prefix(self) -> str:
        return self.document_type.prefix


def format_document_number(document_type: DocumentType, year: int, number: int) -> str:
    """Render ``PREFIX-YEAR-NNNN``, e.g. ``ORD-2026-0001``."""
    return f"{document_type.prefix}-{year}-{number:0{NUMBER_WIDTH}d}"
