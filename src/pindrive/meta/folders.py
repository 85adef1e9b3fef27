"""FolderService — folder hierarchy maintenance and cascading delete.

Parent and child links are stored on both sides (``parent_folder_id``
on the child, ``sub_folder_ids`` on the parent).  Every mutation here
keeps the two in agreement; readers never have to derive one from the
other.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from pindrive.exceptions import InvalidInputError
from pindrive.policy import require_identity

from .files import referenced_handles, unpin_quietly
from .sharing import purge_shares
from .types import FolderContents, FolderDeleteResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pindrive.gateway import PinGateway
    from pindrive.models.files import FileRecord
    from pindrive.models.folders import FolderRecord
    from pindrive.models.shares import ShareRecord
    from pindrive.policy import AccessPolicy
    from pindrive.store.protocol import RecordStore

logger = logging.getLogger(__name__)

REQUIRED_FOLDER_FIELDS = ("id", "name", "created_at", "owner_id")


def validate_folder(folder: FolderRecord) -> None:
    """Raise ``InvalidInputError`` naming every missing required field."""
    missing = [
        name
        for name in REQUIRED_FOLDER_FIELDS
        if getattr(folder, name) is None or getattr(folder, name) == ""
    ]
    if missing:
        raise InvalidInputError(f"Invalid folder, missing: {', '.join(missing)}")


class FolderIndex:
    """Adjacency view over flat folder and file collections.

    Built once per operation.  Children come from both ``sub_folder_ids``
    and ``parent_folder_id`` so that a half-linked child is still found.
    Child ids with no folder record are ignored.  With ``same_owner`` an
    edge only counts when parent and child belong to the same identity.
    """

    def __init__(
        self,
        folders: Iterable[FolderRecord],
        files: Iterable[FileRecord] = (),
        *,
        same_owner: bool = False,
    ) -> None:
        self.by_id: dict[str, FolderRecord] = {f.id: f for f in folders}
        self._same_owner = same_owner
        # dict-as-ordered-set keeps traversal deterministic
        self._children: dict[str, dict[str, None]] = defaultdict(dict)
        for folder in self.by_id.values():
            for child_id in folder.sub_folder_ids:
                if self._linked(folder.id, child_id):
                    self._children[folder.id][child_id] = None
            if folder.parent_folder_id and self._linked(folder.parent_folder_id, folder.id):
                self._children[folder.parent_folder_id][folder.id] = None

        self._files: dict[str, list[FileRecord]] = defaultdict(list)
        for file in files:
            if file.folder_id:
                self._files[file.folder_id].append(file)

    def _linked(self, parent_id: str, child_id: str) -> bool:
        child = self.by_id.get(child_id)
        if child is None:
            return False
        if not self._same_owner:
            return True
        parent = self.by_id.get(parent_id)
        return parent is not None and parent.owner_id == child.owner_id

    def children(self, folder_id: str) -> list[str]:
        return list(self._children.get(folder_id, {}))

    def files_in(self, folder_id: str) -> list[FileRecord]:
        return list(self._files.get(folder_id, []))

    def post_order(self, root_id: str) -> list[str]:
        """Folder ids of the subtree under *root_id*, descendants first.

        Iterative, with a visited set so corrupt cyclic links terminate.
        """
        order: list[str] = []
        visited = {root_id}
        stack: list[tuple[str, bool]] = [(root_id, False)]
        while stack:
            node, expanded = stack.pop()
            if expanded:
                order.append(node)
                continue
            stack.append((node, True))
            for child_id in reversed(self.children(node)):
                if child_id not in visited:
                    visited.add(child_id)
                    stack.append((child_id, False))
        return order


class FolderService:
    """Folder CRUD plus recursive subtree deletion.

    Lock order when several collections are edited: folders, files, shares.
    """

    def __init__(
        self,
        folders: RecordStore[FolderRecord],
        files: RecordStore[FileRecord],
        policy: AccessPolicy,
        gateway: PinGateway,
        shares: RecordStore[ShareRecord] | None = None,
    ) -> None:
        self._folders = folders
        self._files = files
        self._policy = policy
        self._gateway = gateway
        self._shares = shares

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def list_visible(self, identity: str) -> list[FolderRecord]:
        require_identity(identity)
        return self._policy.visible(await self._folders.load_all(), identity)

    async def get(self, folder_id: str, identity: str) -> FolderRecord:
        require_identity(identity)
        if not folder_id:
            raise InvalidInputError("Folder id required")
        return self._policy.resolve(await self._folders.load_all(), folder_id, identity)

    async def contents(self, folder_id: str | None, identity: str) -> FolderContents:
        """Child folders and files of *folder_id*; the caller's root when ``None``."""
        require_identity(identity)
        folders = await self._folders.load_all()
        if folder_id is not None:
            self._policy.resolve(folders, folder_id, identity)
        files = await self._files.load_all()
        return FolderContents(
            folder_id=folder_id,
            folders=[
                f
                for f in self._policy.visible(folders, identity)
                if (f.parent_folder_id or None) == folder_id
            ],
            files=[
                f
                for f in self._policy.visible(files, identity)
                if (f.folder_id or None) == folder_id
            ],
        )

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------

    async def create(self, folder: FolderRecord) -> FolderRecord:
        """Append *folder* and link it into its parent.

        The parent must exist and belong to the same owner; otherwise the
        folder is still created, just left unlinked.
        """
        validate_folder(folder)
        record = folder.model_copy(
            update={"sub_folder_ids": [], "parent_folder_id": folder.parent_folder_id or None},
            deep=True,
        )
        if record.parent_folder_id == record.id:
            raise InvalidInputError("A folder cannot be its own parent")

        async with self._folders.edit() as folders:
            if any(f.id == record.id for f in folders):
                raise InvalidInputError(f"Folder id already exists: {record.id}")
            folders.append(record)
            if record.parent_folder_id is not None:
                self._link(folders, record)

        logger.debug("Created folder %s for %s", record.id, record.owner_id)
        return record

    async def update(
        self, folder_id: str, folder: FolderRecord, identity: str
    ) -> FolderRecord:
        """Replace folder *folder_id* with *folder*.

        ``id``, ``owner_id`` and ``sub_folder_ids`` are kept from the stored
        record.  A changed ``parent_folder_id`` moves the folder: it is
        unlinked from the old parent and linked into the new one.
        """
        require_identity(identity)
        if not folder_id:
            raise InvalidInputError("Folder id required")
        validate_folder(folder.model_copy(update={"id": folder_id, "owner_id": identity}))

        async with self._folders.edit() as folders:
            current = self._policy.resolve(folders, folder_id, identity)
            replacement = folder.model_copy(
                update={
                    "id": current.id,
                    "owner_id": current.owner_id,
                    "sub_folder_ids": list(current.sub_folder_ids),
                    "parent_folder_id": folder.parent_folder_id or None,
                },
                deep=True,
            )

            moved = replacement.parent_folder_id != current.parent_folder_id
            if moved and replacement.parent_folder_id is not None:
                subtree = FolderIndex(folders).post_order(current.id)
                if replacement.parent_folder_id in subtree:
                    raise InvalidInputError(
                        f"Cannot move folder {current.id} under its own subtree"
                    )

            for i, f in enumerate(folders):
                if f.id == current.id:
                    folders[i] = replacement
                    break
            if moved:
                self._unlink(folders, current)
                if replacement.parent_folder_id is not None:
                    self._link(folders, replacement)

        return replacement

    def _link(self, folders: list[FolderRecord], child: FolderRecord) -> None:
        parent = next(
            (
                f
                for f in folders
                if f.id == child.parent_folder_id and f.owner_id == child.owner_id
            ),
            None,
        )
        if parent is None:
            logger.info(
                "Parent %s of folder %s not found for %s; left unlinked",
                child.parent_folder_id,
                child.id,
                child.owner_id,
            )
            return
        if child.id not in parent.sub_folder_ids:
            parent.sub_folder_ids.append(child.id)

    @staticmethod
    def _unlink(folders: list[FolderRecord], child: FolderRecord) -> None:
        if child.parent_folder_id is None:
            return
        for f in folders:
            if f.id == child.parent_folder_id and child.id in f.sub_folder_ids:
                f.sub_folder_ids = [c for c in f.sub_folder_ids if c != child.id]

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, folder_id: str, identity: str) -> FolderDeleteResult:
        """Delete *folder_id*, every descendant folder, and their files.

        Only folders owned by the target's owner are followed, unless the
        caller is an admin.  A surviving folder that still points at a
        removed one is detached to its owner's root.  Content of files owned
        by the caller (every file for an admin) is unpinned along the way;
        unpin failures are logged and collected in the result, never raised.
        Both collections are written once, after the whole subtree has been
        resolved in memory.  Shares on removed files are purged afterwards.
        """
        require_identity(identity)
        if not folder_id:
            raise InvalidInputError("Folder id required")

        async with self._folders.edit() as folders, self._files.edit() as files:
            target = self._policy.resolve(folders, folder_id, identity)
            index = FolderIndex(
                folders, files, same_owner=not self._policy.is_admin(identity)
            )
            order = index.post_order(target.id)
            removed_folders = set(order)

            self._unlink(folders, target)

            removed_files: list[FileRecord] = []
            for node_id in order:
                removed_files.extend(index.files_in(node_id))
            removed_file_ids = {f.id for f in removed_files}

            surviving_files = [f for f in files if f.id not in removed_file_ids]
            surviving_folders = [f for f in folders if f.id not in removed_folders]
            for f in surviving_folders:
                if any(c in removed_folders for c in f.sub_folder_ids):
                    f.sub_folder_ids = [c for c in f.sub_folder_ids if c not in removed_folders]
                if f.parent_folder_id in removed_folders:
                    logger.info(
                        "Detaching folder %s of %s from deleted parent %s",
                        f.id,
                        f.owner_id,
                        f.parent_folder_id,
                    )
                    f.parent_folder_id = None

            result = FolderDeleteResult(
                folder_id=target.id,
                deleted_folder_ids=order,
                deleted_file_ids=[f.id for f in removed_files],
            )
            await self._release_content(removed_files, surviving_files, identity, result)

            folders[:] = surviving_folders
            files[:] = surviving_files

        if self._shares is not None:
            await purge_shares(self._shares, removed_files)

        logger.info(
            "Deleted folder %s: %d folders, %d files, %d unpin failures",
            target.id,
            len(result.deleted_folder_ids),
            len(result.deleted_file_ids),
            len(result.unpin_failures),
        )
        return result

    async def _release_content(
        self,
        removed: list[FileRecord],
        surviving: list[FileRecord],
        identity: str,
        result: FolderDeleteResult,
    ) -> None:
        """Unpin handles of removed files the caller may release.

        Sequential, one call per distinct handle.  Handles still referenced
        by a surviving record stay pinned.
        """
        admin = self._policy.is_admin(identity)
        keep = referenced_handles(surviving)
        seen: set[str] = set()
        for file in removed:
            handle = file.content_handle
            if not handle or handle in keep or handle in seen:
                continue
            if not admin and file.owner_id != identity:
                continue
            seen.add(handle)
            if await unpin_quietly(self._gateway, handle):
                result.unpinned.append(handle)
            else:
                result.unpin_failures.append(handle)
