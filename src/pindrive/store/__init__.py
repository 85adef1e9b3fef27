"""Record stores: whole-collection persistence for files, folders and shares."""

from pindrive.store.base import BaseRecordStore
from pindrive.store.database import DatabaseRecordStore
from pindrive.store.json_store import JsonRecordStore
from pindrive.store.memory import MemoryRecordStore
from pindrive.store.protocol import RecordStore

__all__ = [
    "BaseRecordStore",
    "DatabaseRecordStore",
    "JsonRecordStore",
    "MemoryRecordStore",
    "RecordStore",
]
