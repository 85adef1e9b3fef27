"""SQLModel record models for pindrive."""

from pindrive.models.files import FileRecord, FileRow
from pindrive.models.folders import FolderRecord, FolderRow
from pindrive.models.shares import ShareRecord, ShareRow, new_share_id

__all__ = [
    "FileRecord",
    "FileRow",
    "FolderRecord",
    "FolderRow",
    "ShareRecord",
    "ShareRow",
    "new_share_id",
]
