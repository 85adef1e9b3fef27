"""PinDriveAsync — primary async facade over stores, policy and services."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.ext.asyncio import create_async_engine

from pindrive.gateway import PinataGateway
from pindrive.meta.files import FileService
from pindrive.meta.folders import FolderService
from pindrive.meta.sharing import SharingService
from pindrive.models.files import FileRecord, FileRow
from pindrive.models.folders import FolderRecord, FolderRow
from pindrive.models.shares import ShareRecord, ShareRow
from pindrive.policy import AccessPolicy
from pindrive.store.database import DatabaseRecordStore
from pindrive.store.json_store import JsonRecordStore
from pindrive.store.memory import MemoryRecordStore

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy.ext.asyncio import AsyncEngine

    from pindrive.config import Settings
    from pindrive.gateway import PinGateway
    from pindrive.meta.types import (
        FileDeleteResult,
        FolderContents,
        FolderDeleteResult,
        SharedFileView,
    )
    from pindrive.store.protocol import RecordStore

logger = logging.getLogger(__name__)


class PinDriveAsync:
    """Async facade wiring record stores, access policy, gateway and services.

    Every operation takes the caller identity explicitly; the facade
    trusts it as given.

    In-memory stores (tests, embedding)::

        drive = PinDriveAsync(gateway=my_gateway, admins={"root"})
        await drive.create_folder(FolderRecord(...))

    From environment configuration::

        async with PinDriveAsync.from_settings(Settings()) as drive:
            await drive.list_files("alice")
    """

    def __init__(
        self,
        *,
        gateway: PinGateway,
        files: RecordStore[FileRecord] | None = None,
        folders: RecordStore[FolderRecord] | None = None,
        shares: RecordStore[ShareRecord] | None = None,
        admins: Iterable[str] = (),
        engine: AsyncEngine | None = None,
    ) -> None:
        self._closed = False
        self._gateway = gateway
        self._engine = engine
        self._files_store = files or MemoryRecordStore(FileRecord, name="files")
        self._folders_store = folders or MemoryRecordStore(FolderRecord, name="folders")
        self._shares_store = shares or MemoryRecordStore(ShareRecord, name="shares")
        self.policy = AccessPolicy(admins)

        self.files = FileService(
            self._files_store, self.policy, gateway, shares=self._shares_store
        )
        self.folders = FolderService(
            self._folders_store,
            self._files_store,
            self.policy,
            gateway,
            shares=self._shares_store,
        )
        self.sharing = SharingService(self._shares_store, self._files_store)

    @classmethod
    def from_settings(
        cls, settings: Settings, *, gateway: PinGateway | None = None
    ) -> PinDriveAsync:
        """Build a facade from ``Settings``.

        Uses SQL stores when ``database_url`` is set, JSON stores under
        ``data_dir`` otherwise, and a ``PinataGateway`` unless *gateway* is
        given.
        """
        logging.getLogger("pindrive").setLevel(settings.log_level.upper())

        if gateway is None:
            pinata = settings.pinata
            gateway = PinataGateway(
                api_key=pinata.api_key,
                secret_api_key=pinata.secret_api_key,
                jwt=pinata.jwt,
                base_url=pinata.base_url,
                timeout=pinata.timeout,
            )

        if settings.database_url:
            logger.debug("Using SQL record stores")
            engine = create_async_engine(settings.database_url)
            return cls(
                gateway=gateway,
                files=DatabaseRecordStore(engine, FileRecord, FileRow, name="files"),
                folders=DatabaseRecordStore(engine, FolderRecord, FolderRow, name="folders"),
                shares=DatabaseRecordStore(engine, ShareRecord, ShareRow, name="shares"),
                admins=settings.admin_identities,
                engine=engine,
            )

        data_dir = settings.data_dir
        logger.debug("Using JSON record stores under %s", data_dir)
        return cls(
            gateway=gateway,
            files=JsonRecordStore(data_dir / "files_db.json", FileRecord, name="files"),
            folders=JsonRecordStore(data_dir / "folders_db.json", FolderRecord, name="folders"),
            shares=JsonRecordStore(data_dir / "shares_db.json", ShareRecord, name="shares"),
            admins=settings.admin_identities,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        for store in (self._files_store, self._folders_store, self._shares_store):
            await store.open()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for store in (self._files_store, self._folders_store, self._shares_store):
            await store.close()
        close = getattr(self._gateway, "close", None)
        if close is not None:
            await close()
        if self._engine is not None:
            await self._engine.dispose()

    async def __aenter__(self) -> PinDriveAsync:
        await self.open()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    async def upload_content(self, content: bytes, *, filename: str | None = None) -> str:
        return await self.files.upload_content(content, filename=filename)

    async def unpin_content(self, handle: str) -> None:
        await self.files.unpin_content(handle)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    async def list_files(self, identity: str) -> list[FileRecord]:
        return await self.files.list_visible(identity)

    async def get_file(self, file_id: str, identity: str) -> FileRecord:
        return await self.files.get(file_id, identity)

    async def create_file_meta(self, file: FileRecord) -> FileRecord:
        return await self.files.create(file)

    async def update_file_meta(
        self, file_id: str, file: FileRecord, identity: str
    ) -> FileRecord:
        return await self.files.update(file_id, file, identity)

    async def delete_file(self, file_id: str, identity: str) -> FileDeleteResult:
        return await self.files.delete(file_id, identity)

    # ------------------------------------------------------------------
    # Folders
    # ------------------------------------------------------------------

    async def list_folders(self, identity: str) -> list[FolderRecord]:
        return await self.folders.list_visible(identity)

    async def get_folder(self, folder_id: str, identity: str) -> FolderRecord:
        return await self.folders.get(folder_id, identity)

    async def list_folder_contents(
        self, folder_id: str | None, identity: str
    ) -> FolderContents:
        return await self.folders.contents(folder_id, identity)

    async def create_folder(self, folder: FolderRecord) -> FolderRecord:
        return await self.folders.create(folder)

    async def update_folder(
        self, folder_id: str, folder: FolderRecord, identity: str
    ) -> FolderRecord:
        return await self.folders.update(folder_id, folder, identity)

    async def delete_folder(self, folder_id: str, identity: str) -> FolderDeleteResult:
        return await self.folders.delete(folder_id, identity)

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    async def share_file(self, file_id: str, owner_id: str, shared_with: str) -> ShareRecord:
        return await self.sharing.share(file_id, owner_id, shared_with)

    async def revoke_share(self, file_id: str, shared_with: str, owner_id: str) -> None:
        await self.sharing.revoke(file_id, shared_with, owner_id)

    async def list_shared_with_me(self, identity: str) -> list[SharedFileView]:
        return await self.sharing.list_shared_with(identity)

    async def list_shares_for_file(self, file_id: str, owner_id: str) -> list[ShareRecord]:
        return await self.sharing.list_shares_on_file(file_id, owner_id)
