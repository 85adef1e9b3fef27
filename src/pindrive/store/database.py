"""DatabaseRecordStore — one SQL table per collection via async SQLAlchemy."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from .base import BaseRecordStore
from .protocol import R

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class DatabaseRecordStore(BaseRecordStore[R]):
    """Record store backed by a SQLModel table.

    *row_model* is the ``table=True`` subclass of *model*.  ``save_all``
    deletes every row and inserts the new set inside one transaction, so
    readers see either the old collection or the new one.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        model: type[R],
        row_model: type[SQLModel],
        *,
        name: str | None = None,
        create_tables: bool = True,
    ) -> None:
        super().__init__(model, name=name)
        self._engine = engine
        self._row_model = row_model
        self._create_tables = create_tables
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False
        )

    async def open(self) -> None:
        """Create the backing table if it does not exist yet."""
        if not self._create_tables:
            return
        table = self._row_model.__table__  # type: ignore[attr-defined]
        async with self._engine.begin() as conn:
            await conn.run_sync(lambda c: table.create(c, checkfirst=True))
        logger.debug("Ensured table %s for %s", table.name, self.name)

    async def _read(self) -> list[dict[str, Any]]:
        async with self._session_factory() as session:
            result = await session.execute(select(self._row_model))
            return [row.model_dump() for row in result.scalars().all()]

    def _dump(self, record: R) -> dict[str, Any]:
        # native datetimes for the DateTime columns
        return record.model_dump()

    async def _write(self, payloads: list[dict[str, Any]]) -> None:
        rows = [self._row_model(**payload) for payload in payloads]
        async with self._session_factory() as session, session.begin():
            await session.execute(delete(self._row_model))
            session.add_all(rows)
