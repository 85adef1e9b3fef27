"""ShareRecord model — read grants on a single file."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def new_share_id() -> str:
    """Time-based share id (UUID version 1)."""
    return str(uuid.uuid1())


class ShareRecord(SQLModel):
    """Grant of read access on ``file_id`` from ``owner_id`` to ``shared_with``."""

    id: str = Field(default_factory=new_share_id, primary_key=True)
    file_id: str = Field(index=True)
    owner_id: str = Field(index=True)
    shared_with: str = Field(index=True)
    shared_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),  # type: ignore[invalid-argument-type]
    )


class ShareRow(ShareRecord, table=True):
    """Default share table ``pindrive_shares``."""

    __tablename__ = "pindrive_shares"
