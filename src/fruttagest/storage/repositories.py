"""Async repositories for number sequences and the product catalog."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from fruttagest.models.orders import CatalogEntry
from fruttagest.storage.models import NumberSequence, Product, utcnow

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


# ── Number sequences ─────────────────────────────────────────────────────────


class NumberSequenceRepo:
    """Counter operations on the ``number_sequences`` table.

    The caller owns the transaction: ``increment`` must run inside one and
    the new value is only durable once it commits.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    def _insert(self):
        dialect = self._session.get_bind().dialect.name
        try:
            return _UPSERT_DIALECTS[dialect]
        except KeyError:
            raise NotImplementedError(f"Atomic upsert not supported on {dialect!r}") from None

    async def increment(self, sequence_type: str, year: int, prefix: str) -> int:
        """Create-or-increment the counter in one statement and return it.

        ``INSERT ... ON CONFLICT (type, year) DO UPDATE SET last_number =
        last_number + 1 RETURNING last_number``: the row lock taken by the
        conflict update serialises concurrent callers on the same key.
        """
        insert = self._insert()
        stmt = insert(NumberSequence).values(
            type=sequence_type,
            year=year,
            prefix=prefix,
            last_number=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[NumberSequence.type, NumberSequence.year],
            set_={
                "last_number": NumberSequence.last_number + 1,
                "updated_at": utcnow(),
            },
        ).returning(NumberSequence.last_number)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def get_last_number(self, sequence_type: str, year: int) -> int:
        stmt = select(NumberSequence.last_number).where(
            NumberSequence.type == sequence_type,
            NumberSequence.year == year,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() or 0

    async def list_all(self) -> list[NumberSequence]:
        stmt = select(NumberSequence).order_by(NumberSequence.year.desc(), NumberSequence.type)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def reset_all(self, year: int | None = None) -> int:
        """Set counters back to 0 (all years, or only *year*); returns rows touched."""
        stmt = update(NumberSequence).values(last_number=0, updated_at=utcnow())
        if year is not None:
            stmt = stmt.where(NumberSequence.year == year)
        result = await self._session.execute(stmt)
        return result.rowcount


# ── Products ─────────────────────────────────────────────────────────────────


class ProductRepo:
    """Read access to the product catalog for order matching."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, product: Product) -> Product:
        self._session.add(product)
        await self._session.flush()
        await self._session.refresh(product)
        return product

    async def list_available(self) -> list[CatalogEntry]:
        """Available products as catalog entries, ordered by name."""
        stmt = (
            select(Product)
            .where(Product.is_available.is_(True))
            .order_by(Product.name.asc(), Product.id.asc())
        )
        result = await self._session.execute(stmt)
        return [
            CatalogEntry(id=p.id, name=p.name, unit=p.unit, is_available=p.is_available)
            for p in result.scalars().all()
        ]

    async def list_catalog_names(self) -> list[str]:
        return [entry.name for entry in await self.list_available()]
