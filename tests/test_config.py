"""Tests for Settings and facade construction from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from conftest import FakePinGateway, make_file

from pindrive import PinDriveAsync, Settings
from pindrive.gateway import DEFAULT_PINATA_URL, PinataGateway
from pindrive.store import DatabaseRecordStore, JsonRecordStore

if TYPE_CHECKING:
    from pathlib import Path

    import pytest


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        settings = Settings()
        assert settings.database_url is None
        assert settings.admin_identities == frozenset()
        assert settings.pinata.base_url == DEFAULT_PINATA_URL

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PINDRIVE_DATA_DIR", str(tmp_path / "data"))
        monkeypatch.setenv("PINDRIVE_ADMINS", "root@example.com, ops@example.com ,")
        monkeypatch.setenv("PINATA_JWT", "jwt-token")

        settings = Settings()
        assert settings.data_dir == tmp_path / "data"
        assert settings.admin_identities == {"root@example.com", "ops@example.com"}
        assert settings.pinata.jwt == "jwt-token"

    def test_dotenv_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("PINDRIVE_ADMINS=boss\nPINATA_API_KEY=k\n")

        settings = Settings()
        assert settings.admin_identities == {"boss"}
        assert settings.pinata.api_key == "k"


class TestFromSettings:
    async def test_json_stores(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        settings = Settings(data_dir=tmp_path / "data", admins="root")
        drive = PinDriveAsync.from_settings(settings, gateway=FakePinGateway())

        assert isinstance(drive._files_store, JsonRecordStore)
        assert drive.policy.is_admin("root")

        async with drive:
            await drive.create_file_meta(make_file("f1", "u1"))
        assert (tmp_path / "data" / "files_db.json").exists()

    async def test_database_stores(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        settings = Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'p.db'}")

        async with PinDriveAsync.from_settings(settings, gateway=FakePinGateway()) as drive:
            assert isinstance(drive._folders_store, DatabaseRecordStore)
            await drive.create_file_meta(make_file("f1", "u1"))
            assert [f.id for f in await drive.list_files("u1")] == ["f1"]

    def test_default_gateway_is_pinata(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.chdir(tmp_path)
        drive = PinDriveAsync.from_settings(Settings(data_dir=tmp_path))
        assert isinstance(drive._gateway, PinataGateway)
