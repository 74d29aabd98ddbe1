"""Scheduler settings loaded from the environment using Pydantic Settings."""

import sys
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchedulerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SCHEDULER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Commands registered through Schedule.command()
    python_binary: str = Field(default_factory=lambda: sys.executable or "python3")
    cli_script_name: str = "manage.py"

    # Mutex
    mutex_path: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()) / "cron-scheduler" / "mutex",
        description="Directory for the file mutex",
    )
    mutex_url: Optional[str] = Field(
        default=None,
        description="Async SQLAlchemy URL. When set, locks are shared through the database",
    )
    mutex_expires_after: int = Field(
        default=86400,
        description="Seconds after which an unreleased database lock may be taken over",
    )


_settings: Optional[SchedulerSettings] = None


def get_settings() -> SchedulerSettings:
    """Get or create the settings instance."""
    global _settings
    if _settings is None:
        _settings = SchedulerSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
