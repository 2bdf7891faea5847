"""Tool configuration loaded from HOOKSPACE_* environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class HookspaceSettings(BaseSettings):
    """hookspace settings.

    All fields are read from environment variables with the ``HOOKSPACE_``
    prefix.  For example, ``HOOKSPACE_LOG_LEVEL=DEBUG`` maps to ``log_level``.
    """

    model_config = SettingsConfigDict(
        env_prefix="HOOKSPACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "WARNING"

    # -- Store -----------------------------------------------------------------
    home: str = "~/.cache/hookspace"
    """Directory holding fetched hook repositories (``{home}/repos/...``)."""

    @property
    def home_path(self) -> Path:
        return Path(self.home).expanduser()


@lru_cache(maxsize=1)
def get_settings() -> HookspaceSettings:
    """Return a cached settings instance.

    Call ``get_settings.cache_clear()`` in tests to force a re-read after
    overriding env vars.
    """
    return HookspaceSettings()
