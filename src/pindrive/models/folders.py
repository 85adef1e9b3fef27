"""Folder model with explicit child links.

``sub_folder_ids`` mirrors ``parent_folder_id`` of the children and is
kept in sync by ``FolderService``; it is never derived on read.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime
from sqlmodel import Field, SQLModel


class FolderRecord(SQLModel):
    """A user-owned folder. Subclassed by ``FolderRow`` for the SQL store."""

    id: str = Field(primary_key=True)
    name: str = Field(default="")
    created_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )
    owner_id: str = Field(default="", index=True)
    parent_folder_id: str | None = Field(default=None, index=True)
    sub_folder_ids: list[str] = Field(default_factory=list, sa_type=JSON)


class FolderRow(FolderRecord, table=True):
    """Default folder table ``pindrive_folders``."""

    __tablename__ = "pindrive_folders"
