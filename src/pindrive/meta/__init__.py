"""Metadata layer: folder hierarchy, file metadata, and sharing services."""

from pindrive.meta.files import FileService
from pindrive.meta.folders import FolderIndex, FolderService
from pindrive.meta.sharing import SharingService
from pindrive.meta.types import (
    FileDeleteResult,
    FolderContents,
    FolderDeleteResult,
    SharedFileView,
)

__all__ = [
    "FileDeleteResult",
    "FileService",
    "FolderContents",
    "FolderDeleteResult",
    "FolderIndex",
    "FolderService",
    "SharedFileView",
    "SharingService",
]
