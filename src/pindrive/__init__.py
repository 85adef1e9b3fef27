"""pindrive: folder and sharing metadata for pinned content.

Tracks files pinned to a content-addressed network, organizes them in
per-user folder trees, and grants read access through share records.
"""

__version__ = "0.1.0"

from pindrive._drive import PinDrive
from pindrive._drive_async import PinDriveAsync
from pindrive.config import PinataSettings, Settings
from pindrive.exceptions import (
    AlreadySharedError,
    InvalidInputError,
    NotFoundError,
    NotFoundOrDeniedError,
    PinDriveError,
    UpstreamUnavailableError,
)
from pindrive.gateway import PinataGateway, PinGateway
from pindrive.meta.types import (
    FileDeleteResult,
    FolderContents,
    FolderDeleteResult,
    SharedFileView,
)
from pindrive.models import FileRecord, FolderRecord, ShareRecord
from pindrive.policy import AccessPolicy, Role

__all__ = [
    "AccessPolicy",
    "AlreadySharedError",
    "FileDeleteResult",
    "FileRecord",
    "FolderContents",
    "FolderDeleteResult",
    "FolderRecord",
    "InvalidInputError",
    "NotFoundError",
    "NotFoundOrDeniedError",
    "PinDrive",
    "PinDriveAsync",
    "PinDriveError",
    "PinGateway",
    "PinataGateway",
    "PinataSettings",
    "Role",
    "Settings",
    "ShareRecord",
    "UpstreamUnavailableError",
    "__version__",
]
