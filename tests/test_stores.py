"""Tests for record stores: JSON, memory, and database backends."""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

import pytest
from conftest import make_file, make_folder

from pindrive.models import FileRecord, FolderRecord, FolderRow, ShareRecord
from pindrive.store import (
    DatabaseRecordStore,
    JsonRecordStore,
    MemoryRecordStore,
    RecordStore,
)

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine


# ---------------------------------------------------------------------------
# JsonRecordStore
# ---------------------------------------------------------------------------


class TestJsonRecordStore:
    async def test_missing_file_is_empty(self, tmp_path: Path):
        store = JsonRecordStore(tmp_path / "files_db.json", FileRecord)
        assert await store.load_all() == []

    async def test_save_then_load(self, tmp_path: Path):
        store = JsonRecordStore(tmp_path / "files_db.json", FileRecord)
        await store.save_all([make_file("f1", "u1"), make_file("f2", "u2", "a")])

        loaded = await store.load_all()
        assert [f.id for f in loaded] == ["f1", "f2"]
        assert loaded[1].folder_id == "a"
        assert loaded[0].upload_date == make_file("f1", "u1").upload_date

    async def test_document_is_json_array(self, tmp_path: Path):
        path = tmp_path / "folders_db.json"
        store = JsonRecordStore(path, FolderRecord)
        await store.save_all([make_folder("a", "u1")])

        data = json.loads(path.read_text())
        assert isinstance(data, list)
        assert data[0]["id"] == "a"
        assert data[0]["sub_folder_ids"] == []

    async def test_malformed_json_is_empty(self, tmp_path: Path):
        path = tmp_path / "files_db.json"
        path.write_text("{not json")
        store = JsonRecordStore(path, FileRecord)
        assert await store.load_all() == []

    async def test_non_array_document_is_empty(self, tmp_path: Path):
        path = tmp_path / "files_db.json"
        path.write_text('{"id": "f1"}')
        store = JsonRecordStore(path, FileRecord)
        assert await store.load_all() == []

    async def test_invalid_entry_is_skipped(self, tmp_path: Path):
        path = tmp_path / "shares_db.json"
        good = ShareRecord(file_id="f1", owner_id="u1", shared_with="u2")
        path.write_text(json.dumps([good.model_dump(mode="json"), {"owner_id": "u1"}]))
        store = JsonRecordStore(path, ShareRecord)

        loaded = await store.load_all()
        assert [s.id for s in loaded] == [good.id]

    async def test_write_leaves_no_temp_files(self, tmp_path: Path):
        store = JsonRecordStore(tmp_path / "files_db.json", FileRecord)
        await store.save_all([make_file("f1", "u1")])
        await store.save_all([])
        assert [p.name for p in tmp_path.iterdir()] == ["files_db.json"]

    async def test_open_creates_directory(self, tmp_path: Path):
        store = JsonRecordStore(tmp_path / "nested" / "files_db.json", FileRecord)
        await store.open()
        assert (tmp_path / "nested").is_dir()

    def test_satisfies_protocol(self, tmp_path: Path):
        assert isinstance(JsonRecordStore(tmp_path / "x.json", FileRecord), RecordStore)


# ---------------------------------------------------------------------------
# Edit cycle (shared by all backends)
# ---------------------------------------------------------------------------


class TestEdit:
    async def test_edit_saves_on_exit(self):
        store = MemoryRecordStore(FileRecord)
        async with store.edit() as files:
            files.append(make_file("f1", "u1"))
        assert [f.id for f in await store.load_all()] == ["f1"]

    async def test_edit_discards_on_error(self):
        store = MemoryRecordStore(FileRecord)
        await store.save_all([make_file("f1", "u1")])

        with pytest.raises(RuntimeError):
            async with store.edit() as files:
                files.clear()
                raise RuntimeError("boom")

        assert [f.id for f in await store.load_all()] == ["f1"]
        assert not store.locked

    async def test_loaded_records_are_copies(self):
        store = MemoryRecordStore(FolderRecord)
        await store.save_all([make_folder("a", "u1")])

        first = await store.load_all()
        first[0].sub_folder_ids.append("ghost")
        first[0].name = "changed"

        second = await store.load_all()
        assert second[0].sub_folder_ids == []
        assert second[0].name == "A"

    async def test_concurrent_edits_lose_no_updates(self, tmp_path: Path):
        store = JsonRecordStore(tmp_path / "files_db.json", FileRecord)

        async def add(i: int) -> None:
            async with store.edit() as files:
                await asyncio.sleep(0)
                files.append(make_file(f"f{i}", "u1"))

        await asyncio.gather(*(add(i) for i in range(20)))
        assert len(await store.load_all()) == 20


# ---------------------------------------------------------------------------
# DatabaseRecordStore
# ---------------------------------------------------------------------------


class TestDatabaseRecordStore:
    async def test_empty_table(self, async_engine: AsyncEngine):
        store = DatabaseRecordStore(async_engine, FolderRecord, FolderRow)
        await store.open()
        assert await store.load_all() == []

    async def test_save_replaces_collection(self, async_engine: AsyncEngine):
        store = DatabaseRecordStore(async_engine, FolderRecord, FolderRow)
        await store.open()

        parent = make_folder("a", "u1")
        parent.sub_folder_ids = ["b"]
        await store.save_all([parent, make_folder("b", "u1", "a")])
        await store.save_all([parent])

        loaded = await store.load_all()
        assert [f.id for f in loaded] == ["a"]
        assert loaded[0].sub_folder_ids == ["b"]
        assert isinstance(loaded[0], FolderRecord)

    async def test_edit_cycle(self, async_engine: AsyncEngine):
        store = DatabaseRecordStore(async_engine, FolderRecord, FolderRow)
        await store.open()

        async with store.edit() as folders:
            folders.append(make_folder("a", "u1"))
        async with store.edit() as folders:
            folders[0].name = "Renamed"

        loaded = await store.load_all()
        assert loaded[0].name == "Renamed"
