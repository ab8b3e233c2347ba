"""Application configuration, loaded from environment variables."""

from __future__ import annotations

import tempfile
from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client configuration read from ``LABREPO_*`` env vars (or ``.env``)."""

    model_config = SettingsConfigDict(
        env_prefix="LABREPO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    gitlab_url: str = "https://gitlab.com"
    gitlab_token: SecretStr | None = None
    # Form parameter names (branch_name, ref_name, release_description) follow v3.
    api_version: str = "v3"
    request_timeout: float = 30.0
    archive_chunk_size: int = Field(default=65_536, gt=0)
    default_archive_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir())
    )
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings (cached after first call)."""
    return Settings()
