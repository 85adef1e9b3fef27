"""Result types: FolderDeleteResult, FileDeleteResult, SharedFileView, etc."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from pindrive.models.files import FileRecord
    from pindrive.models.folders import FolderRecord


@dataclass
class FolderDeleteResult:
    """Outcome of a cascading folder delete.

    ``unpin_failures`` lists content handles whose unpin failed; their
    metadata was removed regardless.
    """

    folder_id: str
    deleted_folder_ids: list[str] = field(default_factory=list)
    deleted_file_ids: list[str] = field(default_factory=list)
    unpinned: list[str] = field(default_factory=list)
    unpin_failures: list[str] = field(default_factory=list)


@dataclass
class FileDeleteResult:
    """Outcome of a single file delete."""

    file_id: str
    content_handle: str
    unpinned: bool = False


@dataclass
class FolderContents:
    """Direct children of a folder (or of the caller's root)."""

    folder_id: str | None
    folders: list[FolderRecord] = field(default_factory=list)
    files: list[FileRecord] = field(default_factory=list)


@dataclass
class SharedFileView:
    """A file shared with the caller, joined with its share record."""

    file: FileRecord
    shared_by: str
    shared_at: datetime
    share_id: str
