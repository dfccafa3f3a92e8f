"""Global settings for definition storage, providers and action runners."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class IterbatchSettings(BaseSettings):
    """Environment-driven configuration for iterbatch."""

    model_config = SettingsConfigDict(
        env_prefix="ITERBATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    STORE_PATH: str = Field(
        default=".iterbatch/iterables.json",
        description="JSON file holding persisted iterable definitions.",
    )
    PROVIDERS: str = Field(
        default="",
        description="Comma-separated provider entrypoints (module:attribute).",
    )
    ACTION_COMMAND: str | None = Field(
        default=None,
        description="Shell command run once per item (unset uses the noop runner).",
    )
    ACTION_TIMEOUT_SEC: int = Field(
        default=1800,
        description="Timeout for a single action command invocation.",
    )
    RUNS_DIR: str = Field(
        default=".iterbatch/runs",
        description="Directory for batch run ledgers (events.jsonl, summary.json).",
    )
    RUN_LEDGER: bool = Field(
        default=True,
        description="Write a run ledger for every foreach execution.",
    )
    LOG_LEVEL: str = Field(
        default="WARNING",
        description="Log level for the iterbatch logger hierarchy.",
    )

    @model_validator(mode="after")
    def validate_log_level(self) -> "IterbatchSettings":
        """Normalize LOG_LEVEL to a standard level name."""
        normalized = self.LOG_LEVEL.strip().upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError(
                "ITERBATCH_LOG_LEVEL must be one of " + ", ".join(sorted(_LOG_LEVELS))
            )
        object.__setattr__(self, "LOG_LEVEL", normalized)
        return self

    @property
    def store_path(self) -> Path:
        return Path(self.STORE_PATH)

    @property
    def runs_dir(self) -> Path:
        return Path(self.RUNS_DIR)

    @property
    def log_level(self) -> int:
        return logging.getLevelName(self.LOG_LEVEL)

    def provider_entrypoints(self) -> list[str]:
        return [entry.strip() for entry in self.PROVIDERS.split(",") if entry.strip()]


@lru_cache
def get_settings() -> IterbatchSettings:
    """Return cached settings."""
    return IterbatchSettings()


__all__ = ["IterbatchSettings", "get_settings"]
