"""MemoryRecordStore — process-local collection, no durability."""

from __future__ import annotations

import copy
from typing import Any

from .base import BaseRecordStore
from .protocol import R


class MemoryRecordStore(BaseRecordStore[R]):
    """Keeps serialized payloads in a list.

    Payloads are deep-copied on both read and write, so it behaves like a
    durable store with respect to aliasing.
    """

    def __init__(self, model: type[R], *, name: str | None = None) -> None:
        super().__init__(model, name=name)
        self._payloads: list[dict[str, Any]] = []

    async def _read(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._payloads)

    async def _write(self, payloads: list[dict[str, Any]]) -> None:
        self._payloads = copy.deepcopy(payloads)
