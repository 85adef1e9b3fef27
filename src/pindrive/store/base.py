"""BaseRecordStore — shared locking, validation and edit cycle.

Concrete stores implement ``_read`` and ``_write`` over raw ``dict``
payloads; this class turns them into model instances and serializes
every load-modify-save cycle on the collection behind one lock.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any, Generic

from pydantic import ValidationError

from .protocol import R

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Sequence

logger = logging.getLogger(__name__)


class BaseRecordStore(ABC, Generic[R]):
    """Base class for record stores.

    ``model`` is the record type handed to callers.  Every record
    returned by ``load_all`` is a fresh instance built from the stored
    payload, so callers can never alias stored state.
    """

    def __init__(self, model: type[R], *, name: str | None = None) -> None:
        self.model = model
        self.name = name or model.__name__
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def __aenter__(self) -> BaseRecordStore[R]:
        await self.open()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    async def _read(self) -> list[dict[str, Any]]:
        """Return raw payloads; ``[]`` for missing or malformed storage."""

    @abstractmethod
    async def _write(self, payloads: list[dict[str, Any]]) -> None:
        """Atomically replace the stored payloads."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def locked(self) -> bool:
        """True while an ``edit()`` cycle holds the collection."""
        return self._lock.locked()

    async def load_all(self) -> list[R]:
        payloads = await self._read()
        records: list[R] = []
        for payload in payloads:
            try:
                records.append(self.model.model_validate(payload))
            except ValidationError:
                logger.warning(
                    "Skipping malformed %s entry: %r", self.name, payload, exc_info=True
                )
        logger.debug("Loaded %d %s records", len(records), self.name)
        return records

    def _dump(self, record: R) -> dict[str, Any]:
        """Serialize one record for ``_write``.  JSON-safe by default."""
        return record.model_dump(mode="json")

    async def save_all(self, records: Sequence[R]) -> None:
        payloads = [self._dump(record) for record in records]
        await self._write(payloads)
        logger.debug("Saved %d %s records", len(payloads), self.name)

    @asynccontextmanager
    async def edit(self) -> AsyncIterator[list[R]]:
        """Lock the collection, yield its records, and save them back.

        The yielded list may be mutated in place.  If the body raises,
        nothing is written and the lock is released.
        """
        async with self._lock:
            records = await self.load_all()
            yield records
            await self.save_all(records)
