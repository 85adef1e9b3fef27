"""PinDrive — synchronous wrapper around ``PinDriveAsync``."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any

from pindrive._drive_async import PinDriveAsync

if TYPE_CHECKING:
    from pindrive.config import Settings
    from pindrive.meta.types import (
        FileDeleteResult,
        FolderContents,
        FolderDeleteResult,
        SharedFileView,
    )
    from pindrive.models.files import FileRecord
    from pindrive.models.folders import FolderRecord
    from pindrive.models.shares import ShareRecord


class PinDrive:
    """Synchronous facade backed by a private event loop in a daemon thread.

    Lets plain sync code (scripts, WSGI handlers) use the async services.
    Either wrap an existing ``PinDriveAsync`` or build one from settings::

        with PinDrive.from_settings(Settings()) as drive:
            drive.list_files("alice")
    """

    def __init__(self, drive: PinDriveAsync) -> None:
        self._closed = False
        self._drive = drive

        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._thread.start()

        self._run(self._drive.open())

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> PinDrive:
        return cls(PinDriveAsync.from_settings(settings, **kwargs))

    def _run(self, coro: Any) -> Any:
        """Submit *coro* to the private loop and block for the result."""
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    @property
    def drive(self) -> PinDriveAsync:
        return self._drive

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the async drive, stop the event loop and join the thread."""
        if self._closed:
            return
        self._closed = True

        try:
            self._run(self._drive.close())
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=5)

    def __enter__(self) -> PinDrive:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Sync wrappers
    # ------------------------------------------------------------------

    def upload_content(self, content: bytes, *, filename: str | None = None) -> str:
        return self._run(self._drive.upload_content(content, filename=filename))

    def unpin_content(self, handle: str) -> None:
        self._run(self._drive.unpin_content(handle))

    def list_files(self, identity: str) -> list[FileRecord]:
        return self._run(self._drive.list_files(identity))

    def get_file(self, file_id: str, identity: str) -> FileRecord:
        return self._run(self._drive.get_file(file_id, identity))

    def create_file_meta(self, file: FileRecord) -> FileRecord:
        return self._run(self._drive.create_file_meta(file))

    def update_file_meta(self, file_id: str, file: FileRecord, identity: str) -> FileRecord:
        return self._run(self._drive.update_file_meta(file_id, file, identity))

    def delete_file(self, file_id: str, identity: str) -> FileDeleteResult:
        return self._run(self._drive.delete_file(file_id, identity))

    def list_folders(self, identity: str) -> list[FolderRecord]:
        return self._run(self._drive.list_folders(identity))

    def get_folder(self, folder_id: str, identity: str) -> FolderRecord:
        return self._run(self._drive.get_folder(folder_id, identity))

    def list_folder_contents(self, folder_id: str | None, identity: str) -> FolderContents:
        return self._run(self._drive.list_folder_contents(folder_id, identity))

    def create_folder(self, folder: FolderRecord) -> FolderRecord:
        return self._run(self._drive.create_folder(folder))

    def update_folder(self, folder_id: str, folder: FolderRecord, identity: str) -> FolderRecord:
        return self._run(self._drive.update_folder(folder_id, folder, identity))

    def delete_folder(self, folder_id: str, identity: str) -> FolderDeleteResult:
        return self._run(self._drive.delete_folder(folder_id, identity))

    def share_file(self, file_id: str, owner_id: str, shared_with: str) -> ShareRecord:
        return self._run(self._drive.share_file(file_id, owner_id, shared_with))

    def revoke_share(self, file_id: str, shared_with: str, owner_id: str) -> None:
        self._run(self._drive.revoke_share(file_id, shared_with, owner_id))

    def list_shared_with_me(self, identity: str) -> list[SharedFileView]:
        return self._run(self._drive.list_shared_with_me(identity))

    def list_shares_for_file(self, file_id: str, owner_id: str) -> list[ShareRecord]:
        return self._run(self._drive.list_shares_for_file(file_id, owner_id))
