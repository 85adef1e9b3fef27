"""AccessPolicy — ownership, admin and share-based access decisions.

Pure functions over records; no store access.  The admin set is
injected at construction so tests can fake roles.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol, TypeVar

from .exceptions import InvalidInputError, NotFoundOrDeniedError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from pindrive.models.files import FileRecord
    from pindrive.models.shares import ShareRecord


class Role(str, Enum):
    """Role of a caller identity."""

    ADMIN = "admin"
    STANDARD = "standard"


class OwnedRecord(Protocol):
    id: str
    owner_id: str


T = TypeVar("T", bound=OwnedRecord)


def require_identity(identity: str | None) -> str:
    """Raise if *identity* is missing or blank."""
    if not identity or not identity.strip():
        raise InvalidInputError("caller identity is required")
    return identity


class AccessPolicy:
    """Decides who may view, mutate, or read a record."""

    def __init__(self, admins: Iterable[str] = ()) -> None:
        self._admins = frozenset(a for a in admins if a)

    @property
    def admins(self) -> frozenset[str]:
        return self._admins

    def role_of(self, identity: str) -> Role:
        return Role.ADMIN if identity in self._admins else Role.STANDARD

    def is_admin(self, identity: str) -> bool:
        return self.role_of(identity) is Role.ADMIN

    def can_access(self, record: OwnedRecord, identity: str) -> bool:
        """View/mutate check: admins always, others only their own records."""
        return self.is_admin(identity) or record.owner_id == identity

    def visible(self, records: Iterable[T], identity: str) -> list[T]:
        """Filter *records* down to those *identity* may see."""
        if self.is_admin(identity):
            return list(records)
        return [r for r in records if r.owner_id == identity]

    def resolve(self, records: Iterable[T], record_id: str, identity: str) -> T:
        """Find *record_id* among *records* if *identity* may access it.

        Absent and inaccessible records raise the same
        ``NotFoundOrDeniedError``.
        """
        for record in records:
            if record.id == record_id and self.can_access(record, identity):
                return record
        raise NotFoundOrDeniedError(f"Not found or access denied: {record_id}")

    def can_read_file(
        self,
        file: FileRecord,
        identity: str,
        shares: Iterable[ShareRecord] = (),
    ) -> bool:
        """Read check for file metadata; an active share also grants read.

        A share only counts when it was issued by the file's current owner,
        so a grant never carries over to a reused file id.
        """
        if self.can_access(file, identity):
            return True
        return any(
            s.file_id == file.id and s.owner_id == file.owner_id and s.shared_with == identity
            for s in shares
        )
