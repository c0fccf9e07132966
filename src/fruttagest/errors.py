"""Exceptions raised by the numbering and order-parsing services."""
from __future__ import annotations


class FruttaGestError(Exception):
    """Base class for all package errors."""


class RetryableStoreError(FruttaGestError):
    """The sequence counter could not be durably incremented.

    Nothing was committed, so the caller may retry without risking a
    duplicate number.
    """

    def __init__(self, message: str, *, document_type: str | None = None, year: int | None = None):
        super().__init__(message)
        self.document_type = document_type
        self.year = year


class ExtractionError(FruttaGestError):
    """The extraction model was unreachable or answered with unusable output."""


class TranscriptionError(FruttaGestError):
    """A voice note could not be transcribed."""
