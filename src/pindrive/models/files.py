"""File metadata model.

Provides ``FileRecord`` (non-table) and ``FileRow`` (concrete table).
Services work with ``FileRecord``; ``FileRow`` only exists for the
database-backed record store.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class FileRecord(SQLModel):
    """Metadata for one pinned file.

    ``content_handle`` is the CID returned by the pin gateway.
    ``folder_id`` of ``None`` places the file at the owner's root.
    """

    id: str = Field(primary_key=True)
    name: str = Field(default="")
    size: int | None = Field(default=None)
    upload_date: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    mime_type: str = Field(default="")
    content_handle: str = Field(default="", index=True)
    owner_id: str = Field(default="", index=True)
    folder_id: str | None = Field(default=None, index=True)


class FileRow(FileRecord, table=True):
    """Default file table ``pindrive_files``."""

    __tablename__ = "pindrive_files"
