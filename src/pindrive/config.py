"""Settings: environment-driven configuration via pydantic-settings.

Environment variables take precedence over ``.env`` values, which take
precedence over the defaults below.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .gateway import DEFAULT_PINATA_URL


class PinataSettings(BaseSettings):
    """Credentials and endpoint of the Pinata pinning service."""

    model_config = SettingsConfigDict(env_prefix="PINATA_", env_file=".env", extra="ignore")

    api_key: str = Field(default="", description="Pinata API key (used for pinning)")
    secret_api_key: str = Field(default="", description="Pinata secret API key")
    jwt: str = Field(default="", description="Pinata JWT (used for unpinning)")
    base_url: str = Field(default=DEFAULT_PINATA_URL, description="Pinata API base URL")
    timeout: float = Field(default=60.0, description="HTTP timeout in seconds")


class Settings(BaseSettings):
    """Main pindrive settings.

    ``admins`` is a comma-separated list of identities with unrestricted
    access.  When ``database_url`` is set the SQL record store is used;
    otherwise collections are JSON documents under ``data_dir``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PINDRIVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".pindrive",
        description="Directory holding the JSON collections",
    )
    database_url: str | None = Field(default=None, description="Async SQLAlchemy URL")
    admins: str = Field(default="", description="Comma-separated admin identities")
    log_level: str = Field(default="INFO", description="Logging level")
    pinata: PinataSettings = Field(default_factory=PinataSettings)

    @property
    def admin_identities(self) -> frozenset[str]:
        return frozenset(a.strip() for a in self.admins.split(",") if a.strip())
