"""JsonRecordStore — one JSON document per collection on local disk."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from .base import BaseRecordStore
from .protocol import R

logger = logging.getLogger(__name__)


class JsonRecordStore(BaseRecordStore[R]):
    """Record store persisted as a pretty-printed JSON array.

    Writes are atomic via tempfile + replace in the same directory, so a
    crash leaves either the previous document or the new one.  A missing
    file reads as an empty collection; so does a document that cannot be
    decoded or is not a JSON array (logged at WARNING).
    """

    def __init__(self, path: Path | str, model: type[R], *, name: str | None = None) -> None:
        super().__init__(model, name=name)
        self.path = Path(path)

    async def open(self) -> None:
        await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)

    async def _read(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self._read_sync)

    async def _write(self, payloads: list[dict[str, Any]]) -> None:
        await asyncio.to_thread(self._write_sync, payloads)

    def _read_sync(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            logger.warning("Unreadable %s store at %s; treating as empty", self.name, self.path)
            return []
        if not isinstance(data, list):
            logger.warning("%s store at %s is not a JSON array; treating as empty", self.name, self.path)
            return []
        return [item for item in data if isinstance(item, dict)]

    def _write_sync(self, payloads: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payloads, f, indent=2)
            Path(tmp_path).replace(self.path)
        except Exception:
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
