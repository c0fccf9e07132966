"""Test the SQL sequence store against a SQLite file database."""
import asyncio
from datetime import date
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker
from fruttagest.errors import RetryableStoreError
from fruttagest.models.sequences import DocumentType, SequenceKey
from fruttagest.numbering import SequenceGenerator, SqlSequenceStore
from fruttagest.storage.database import build_engine
from fruttagest.storage.models import Base
from fruttagest.storage.repositories import NumberSequenceRepo

ORDERS_2026 = SequenceKey(document_type=DocumentType.ORDER, year=2026)


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'sequences.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


class TestSqlSequenceStore:
    @pytest.mark.asyncio
    async def test_first_increment_creates_row(self, session_factory):
        store = SqlSequenceStore(session_factory)
        assert await store.increment_and_get(ORDERS_2026) == 1

        async with session_factory() as session:
            rows = await NumberSequenceRepo(session).list_all()
        assert [(r.type, r.year, r.prefix, r.last_number) for r in rows] == [("ORDER", 2026, "ORD", 1)]

    @pytest.mark.asyncio
    async def test_sequential_increments(self, session_factory):
        store = SqlSequenceStore(session_factory)
        values = [await store.increment_and_get(ORDERS_2026) for _ in range(4)]
        assert values == [1, 2, 3, 4]
        assert await store.peek(ORDERS_2026) == 4

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, session_factory):
        store = SqlSequenceStore(session_factory)
        await store.increment_and_get(ORDERS_2026)
        await store.increment_and_get(ORDERS_2026)
        assert await store.increment_and_get(SequenceKey(document_type=DocumentType.ORDER, year=2027)) == 1
        assert await store.increment_and_get(SequenceKey(document_type=DocumentType.INVOICE, year=2026)) == 1

    @pytest.mark.asyncio
    async def test_peek_unknown_key_is_zero(self, session_factory):
        assert await SqlSequenceStore(session_factory).peek(ORDERS_2026) == 0

    @pytest.mark.asyncio
    async def test_concurrent_increments_are_distinct(self, session_factory):
        store = SqlSequenceStore(session_factory)
        values = await asyncio.gather(*(store.increment_and_get(ORDERS_2026) for _ in range(5)))
        assert sorted(values) == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_reset(self, session_factory):
        store = SqlSequenceStore(session_factory)
        await store.increment_and_get(ORDERS_2026)
        await store.increment_and_get(SequenceKey(document_type=DocumentType.ORDER, year=2025))

        assert await store.reset(2025) == 1
        assert await store.peek(SequenceKey(document_type=DocumentType.ORDER, year=2025)) == 0
        assert await store.peek(ORDERS_2026) == 1

        assert await store.reset() == 2
        assert await store.increment_and_get(ORDERS_2026) == 1

    @pytest.mark.asyncio
    async def test_generator_over_sql_store(self, session_factory):
        generator = SequenceGenerator(SqlSequenceStore(session_factory), today=lambda: date(2026, 3, 1))
        assert await generator.next_number("DELIVERY_NOTE") == "DDT-2026-0001"
        assert await generator.next_number("DELIVERY_NOTE") == "DDT-2026-0002"

    @pytest.mark.asyncio
    async def test_unreachable_database_is_retryable(self, tmp_path):
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
        store = SqlSequenceStore(async_sessionmaker(engine))
        try:
            with pytest.raises(RetryableStoreError) as exc_info:
                await store.increment_and_get(ORDERS_2026)
        finally:
            await engine.dispose()
        assert exc_info.value.document_type == "ORDER"
        assert exc_info.value.year == 2026

    @pytest.mark.asyncio
    async def test_unreachable_database_on_read_and_reset(self, tmp_path):
        engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'db.sqlite'}")
        store = SqlSequenceStore(async_sessionmaker(engine))
        try:
            with pytest.raises(RetryableStoreError):
                await store.peek(ORDERS_2026)
            with pytest.raises(RetryableStoreError):
                await store.reset(2026)
        finally:
            await engine.dispose()
