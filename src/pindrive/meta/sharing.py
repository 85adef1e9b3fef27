"""SharingService — share CRUD and the "shared with me" view.

Stateless apart from the stores it receives at construction.  Share
records only ever grant read access to a single file.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pindrive.exceptions import (
    AlreadySharedError,
    InvalidInputError,
    NotFoundError,
    NotFoundOrDeniedError,
)
from pindrive.models.shares import ShareRecord
from pindrive.policy import require_identity

from .types import SharedFileView

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pindrive.models.files import FileRecord
    from pindrive.store.protocol import RecordStore

logger = logging.getLogger(__name__)


async def purge_shares(shares: RecordStore[ShareRecord], files: Iterable[FileRecord]) -> int:
    """Drop every share issued on *files* by their owners.  Returns the number removed."""
    grants = {(f.id, f.owner_id) for f in files}
    if not grants:
        return 0
    async with shares.edit() as records:
        kept = [s for s in records if (s.file_id, s.owner_id) not in grants]
        removed = len(records) - len(kept)
        records[:] = kept
    if removed:
        logger.debug("Purged %d shares on deleted files", removed)
    return removed


class SharingService:
    """Manages file shares between an owner and other identities.

    Ownership checks are strict: only the file's owner may share,
    revoke, or list shares, admins included.
    """

    def __init__(
        self,
        shares: RecordStore[ShareRecord],
        files: RecordStore[FileRecord],
    ) -> None:
        self._shares = shares
        self._files = files

    async def _require_owned_file(self, file_id: str, owner_id: str) -> FileRecord:
        if not file_id:
            raise InvalidInputError("File id required")
        require_identity(owner_id)
        for file in await self._files.load_all():
            if file.id == file_id and file.owner_id == owner_id:
                return file
        raise NotFoundOrDeniedError("File not found or not owned by you")

    async def share(self, file_id: str, owner_id: str, shared_with: str) -> ShareRecord:
        """Grant *shared_with* read access to *file_id*."""
        if not file_id:
            raise InvalidInputError("File id required")
        require_identity(owner_id)
        if not shared_with:
            raise InvalidInputError("Identity to share with is required")
        if shared_with == owner_id:
            raise InvalidInputError("Cannot share a file with its owner")
        async with self._shares.edit() as shares:
            # under the shares lock so a concurrent delete purges this grant
            await self._require_owned_file(file_id, owner_id)
            if any(s.file_id == file_id and s.shared_with == shared_with for s in shares):
                raise AlreadySharedError(f"File {file_id} is already shared with {shared_with}")
            share = ShareRecord(file_id=file_id, owner_id=owner_id, shared_with=shared_with)
            shares.append(share)

        logger.debug("Shared %s from %s to %s", file_id, owner_id, shared_with)
        return share

    async def revoke(self, file_id: str, shared_with: str, owner_id: str) -> None:
        """Remove the share of *file_id* with *shared_with*.

        Raises ``NotFoundError`` if no such share exists.
        """
        if not shared_with:
            raise InvalidInputError("Identity to revoke is required")
        await self._require_owned_file(file_id, owner_id)

        async with self._shares.edit() as shares:
            kept = [
                s for s in shares if not (s.file_id == file_id and s.shared_with == shared_with)
            ]
            if len(kept) == len(shares):
                raise NotFoundError("Share not found")
            shares[:] = kept

    async def list_shared_with(self, identity: str) -> list[SharedFileView]:
        """Files shared with *identity*.

        Shares whose file has since been deleted, or whose file id now
        belongs to a different owner, are dropped silently.
        """
        require_identity(identity)
        shares = [s for s in await self._shares.load_all() if s.shared_with == identity]
        if not shares:
            return []
        files = {f.id: f for f in await self._files.load_all()}

        views: list[SharedFileView] = []
        for share in shares:
            file = files.get(share.file_id)
            if file is None or file.owner_id != share.owner_id:
                continue
            views.append(
                SharedFileView(
                    file=file,
                    shared_by=share.owner_id,
                    shared_at=share.shared_at,
                    share_id=share.id,
                )
            )
        return views

    async def list_shares_on_file(self, file_id: str, owner_id: str) -> list[ShareRecord]:
        """All share records on *file_id*; the caller must own the file."""
        await self._require_owned_file(file_id, owner_id)
        return [s for s in await self._shares.load_all() if s.file_id == file_id]
