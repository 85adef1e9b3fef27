"""RecordStore protocol — runtime-checkable interface for one collection.

A store holds every record of a single kind (files, folders, or shares)
and only supports whole-collection reads and writes.  There is no
partial update: callers load everything, modify it in memory, and save
everything back.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, TypeVar, runtime_checkable

from sqlmodel import SQLModel

if TYPE_CHECKING:
    from collections.abc import Sequence
    from contextlib import AbstractAsyncContextManager

R = TypeVar("R", bound=SQLModel)


@runtime_checkable
class RecordStore(Protocol[R]):
    """Durable collection of records of one model type."""

    async def open(self) -> None:
        """Prepare the backing storage.  No-op if not needed."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        ...

    async def load_all(self) -> list[R]:
        """Return copies of every record; an empty list if nothing was ever saved."""
        ...

    async def save_all(self, records: Sequence[R]) -> None:
        """Atomically replace the whole collection with *records*."""
        ...

    def edit(self) -> AbstractAsyncContextManager[list[R]]:
        """Serialized load-modify-save cycle; saves on clean exit only."""
        ...
