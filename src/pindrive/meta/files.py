"""FileService — file metadata CRUD and direct content pin/unpin."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pindrive.exceptions import InvalidInputError, NotFoundOrDeniedError
from pindrive.policy import require_identity

from .sharing import purge_shares
from .types import FileDeleteResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pindrive.gateway import PinGateway
    from pindrive.models.files import FileRecord
    from pindrive.models.shares import ShareRecord
    from pindrive.policy import AccessPolicy
    from pindrive.store.protocol import RecordStore

logger = logging.getLogger(__name__)

REQUIRED_FILE_FIELDS = (
    "id",
    "name",
    "size",
    "upload_date",
    "mime_type",
    "content_handle",
    "owner_id",
)


def validate_file(file: FileRecord) -> None:
    """Raise ``InvalidInputError`` naming every missing required field."""
    missing = [
        name
        for name in REQUIRED_FILE_FIELDS
        if getattr(file, name) is None or getattr(file, name) == ""
    ]
    if missing:
        raise InvalidInputError(f"Invalid file metadata, missing: {', '.join(missing)}")
    if file.size is not None and file.size < 0:
        raise InvalidInputError("Invalid file metadata, size must not be negative")


async def unpin_quietly(gateway: PinGateway, handle: str) -> bool:
    """Unpin *handle*, logging instead of raising.  Returns True on success.

    Used wherever remote failure must not block a local metadata
    mutation.
    """
    try:
        await gateway.unpin(handle)
    except Exception:
        logger.warning("Failed to unpin %s; metadata removed anyway", handle, exc_info=True)
        return False
    return True


def referenced_handles(files: Iterable[FileRecord]) -> set[str]:
    return {f.content_handle for f in files if f.content_handle}


class FileService:
    """Manages file metadata records.

    Receives the file store, policy and gateway at construction.  The
    share store is optional; without it ``get`` only honours ownership.
    """

    def __init__(
        self,
        files: RecordStore[FileRecord],
        policy: AccessPolicy,
        gateway: PinGateway,
        shares: RecordStore[ShareRecord] | None = None,
    ) -> None:
        self._files = files
        self._policy = policy
        self._gateway = gateway
        self._shares = shares

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    async def upload_content(self, content: bytes, *, filename: str | None = None) -> str:
        """Pin *content*; gateway failures propagate."""
        if not content:
            raise InvalidInputError("No file uploaded")
        return await self._gateway.pin(content, filename=filename)

    async def unpin_content(self, handle: str) -> None:
        """Unpin *handle*; gateway failures propagate."""
        if not handle:
            raise InvalidInputError("CID is required")
        await self._gateway.unpin(handle)

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    async def list_visible(self, identity: str) -> list[FileRecord]:
        require_identity(identity)
        return self._policy.visible(await self._files.load_all(), identity)

    async def get(self, file_id: str, identity: str) -> FileRecord:
        """Return a file the caller owns, administers, or has been shared."""
        require_identity(identity)
        if not file_id:
            raise InvalidInputError("File id required")
        files = await self._files.load_all()
        shares = await self._shares.load_all() if self._shares is not None else []
        for file in files:
            if file.id == file_id and self._policy.can_read_file(file, identity, shares):
                return file
        raise NotFoundOrDeniedError(f"Not found or access denied: {file_id}")

    async def create(self, file: FileRecord) -> FileRecord:
        validate_file(file)
        record = file.model_copy(deep=True)
        async with self._files.edit() as files:
            if any(f.id == record.id for f in files):
                raise InvalidInputError(f"File id already exists: {record.id}")
            files.append(record)
        return record

    async def update(self, file_id: str, file: FileRecord, identity: str) -> FileRecord:
        """Replace the record *file_id* with *file*, keeping id and owner."""
        require_identity(identity)
        if not file_id:
            raise InvalidInputError("File id required")
        validate_file(file.model_copy(update={"id": file_id, "owner_id": identity}))
        async with self._files.edit() as files:
            current = self._policy.resolve(files, file_id, identity)
            replacement = file.model_copy(
                update={"id": current.id, "owner_id": current.owner_id}, deep=True
            )
            for i, f in enumerate(files):
                if f.id == current.id:
                    files[i] = replacement
                    break
        return replacement

    async def delete(self, file_id: str, identity: str) -> FileDeleteResult:
        """Remove the record, then unpin its content best-effort.

        The handle stays pinned while any other record still references it.
        Shares on the file are purged once the record is gone.
        """
        require_identity(identity)
        if not file_id:
            raise InvalidInputError("File id required")
        async with self._files.edit() as files:
            target = self._policy.resolve(files, file_id, identity)
            files[:] = [f for f in files if f.id != target.id]
            remaining = referenced_handles(files)

        if self._shares is not None:
            await purge_shares(self._shares, [target])

        result = FileDeleteResult(file_id=target.id, content_handle=target.content_handle)
        if target.content_handle and target.content_handle not in remaining:
            result.unpinned = await unpin_quietly(self._gateway, target.content_handle)
        return result
