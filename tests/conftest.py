"""Shared fixtures for pindrive tests."""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from pindrive import FileRecord, FolderRecord, PinDriveAsync
from pindrive.exceptions import UpstreamUnavailableError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

ADMIN = "root@example.com"


class FakePinGateway:
    """In-process pin gateway that records calls.

    Set ``fail_unpin`` (True or a set of handles) or ``fail_pin`` to make
    calls raise ``UpstreamUnavailableError``.
    """

    def __init__(self) -> None:
        self.pinned: dict[str, bytes] = {}
        self.unpinned: list[str] = []
        self.fail_pin = False
        self.fail_unpin: bool | set[str] = False

    async def pin(self, content: bytes, *, filename: str | None = None) -> str:
        if self.fail_pin:
            raise UpstreamUnavailableError("pin failed")
        handle = "bafy" + hashlib.sha256(content).hexdigest()[:16]
        self.pinned[handle] = content
        return handle

    async def unpin(self, handle: str) -> None:
        if self.fail_unpin is True or (
            isinstance(self.fail_unpin, set) and handle in self.fail_unpin
        ):
            raise UpstreamUnavailableError(f"unpin failed for {handle}")
        self.unpinned.append(handle)
        self.pinned.pop(handle, None)


def make_file(
    file_id: str,
    owner: str,
    folder_id: str | None = None,
    *,
    handle: str | None = None,
    name: str | None = None,
) -> FileRecord:
    return FileRecord(
        id=file_id,
        name=name or f"{file_id}.txt",
        size=12,
        upload_date=datetime(2024, 5, 1, tzinfo=UTC),
        mime_type="text/plain",
        content_handle=handle or f"cid-{file_id}",
        owner_id=owner,
        folder_id=folder_id,
    )


def make_folder(
    folder_id: str,
    owner: str,
    parent: str | None = None,
    *,
    name: str | None = None,
) -> FolderRecord:
    return FolderRecord(
        id=folder_id,
        name=name or folder_id.upper(),
        created_at=datetime(2024, 5, 1, tzinfo=UTC),
        owner_id=owner,
        parent_folder_id=parent,
    )


@pytest.fixture
def gateway() -> FakePinGateway:
    return FakePinGateway()


@pytest.fixture
async def drive(gateway: FakePinGateway) -> AsyncIterator[PinDriveAsync]:
    """Facade over in-memory stores with a single admin identity."""
    async with PinDriveAsync(gateway=gateway, admins={ADMIN}) as d:
        yield d


@pytest.fixture
async def async_engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Async SQLite engine on a temp file; tables are created by the stores."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'pindrive.db'}", echo=False)
    yield eng
    await eng.dispose()
