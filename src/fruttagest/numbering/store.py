"""Sequence stores: where document counters live.

Every store exposes one atomic primitive, ``increment_and_get``. Callers
never read a counter and write it back themselves.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import asynccontextmanager

import structlog
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..errors import RetryableStoreError
from ..models.sequences import SequenceKey
from ..storage.repositories import NumberSequenceRepo

logger = structlog.get_logger(__name__)

# Failures after which nothing was committed and a retry is safe
TRANSIENT_STORE_ERRORS = (DBAPIError, OSError, asyncio.TimeoutError)


class SequenceStore(ABC):
    """Durable counters keyed by (document type, year)."""

    @abstractmethod
    async def increment_and_get(self, key: SequenceKey) -> int:
        """Atomically create-or-increment the counter and return the new value.

        Raises ``RetryableStoreError`` if the increment was not committed.
        """
        ...

    @abstractmethod
    async def peek(self, key: SequenceKey) -> int:
        """Current counter value without issuing a number (0 if unused)."""
        ...

    @abstractmethod
    async def reset(self, year: int | None = None) -> int:
        """Administrative reset of counters to 0; returns how many were reset."""
        ...


class InMemorySequenceStore(SequenceStore):
    """Process-local store for tests and single-process tools.

    ``latency`` adds an await inside the critical section so tests can
    force concurrent callers to interleave.
    """

    def __init__(self, initial: dict[SequenceKey, int] | None = None, *, latency: float = 0.0):
        self._counters: dict[SequenceKey, int] = defaultdict(int, initial or {})
        self._lock = asyncio.Lock()
        self._latency = latency

    async def increment_and_get(self, key: SequenceKey) -> int:
        async with self._lock:
            value = self._counters[key] + 1
            if self._latency:
                await asyncio.sleep(self._latency)
            self._counters[key] = value
            return value

    async def peek(self, key: SequenceKey) -> int:
        return self._counters.get(key, 0)

    async def reset(self, year: int | None = None) -> int:
        async with self._lock:
            keys = [k for k in self._counters if year is None or k.year == year]
            for k in keys:
                self._counters[k] = 0
            return len(keys)


class SqlSequenceStore(SequenceStore):
    """Counters in the ``number_sequences`` table, one transaction per call.

    Transient database failures surface as ``RetryableStoreError`` from every
    operation.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def increment_and_get(self, key: SequenceKey) -> int:
        async with self._retryable("increment", key.document_type.value, key.year):
            async with self._session_factory() as session:
                async with session.begin():
                    return await NumberSequenceRepo(session).increment(
                        key.document_type.value, key.year, key.prefix,
                    )

    async def peek(self, key: SequenceKey) -> int:
        async with self._retryable("read", key.document_type.value, key.year):
            async with self._session_factory() as session:
                return await NumberSequenceRepo(session).get_last_number(key.document_type.value, key.year)

    async def reset(self, year: int | None = None) -> int:
        async with self._retryable("reset", None, year):
            async with self._session_factory() as session:
                async with session.begin():
                    count = await NumberSequenceRepo(session).reset_all(year)
        logger.warning("sequences_reset", year=year, count=count)
        return count

    @asynccontextmanager
    async def _retryable(self, action: str, document_type: str | None, year: int | None):
        try:
            yield
        except TRANSIENT_STORE_ERRORS as exc:
            logger.error(
                "sequence_store_failed",
                action=action,
                document_type=document_type,
                year=year,
                error=str(exc),
            )
            raise RetryableStoreError(
                f"Could not {action} {document_type or 'all'} sequences for {year or 'all years'}",
                document_type=document_type,
                year=year,
            ) from exc
