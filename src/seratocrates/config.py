"""Configuration for the seratocrates command-line tool."""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

_BASE_DIR_NAME = ".seratocrates"
_CONFIG_FILE = "config.toml"


def get_base_dir() -> Path:
    """Return the base directory for seratocrates user files (~/.seratocrates/)."""
    return Path.home() / _BASE_DIR_NAME


def default_config_path() -> Path:
    return get_base_dir() / _CONFIG_FILE


# ---------------------------------------------------------------------------
# Config models
# ---------------------------------------------------------------------------


class LibrarySettings(BaseModel):
    """Where a Serato library lives and how its files are laid out."""

    root: Path = Field(default=Path("."), description="Directory containing the _Serato_ folder")
    serato_dir: str = Field(default="_Serato_", description="Name of the Serato folder")
    database_file: str = Field(default="database V2", description="Name of the track database file")
    subcrates_dir: str = Field(default="Subcrates", description="Folder holding .crate files")
    crate_extension: str = Field(default=".crate", description="Extension of crate files")
    skip_unreadable_crates: bool = Field(
        default=True,
        description="Log and skip crate files that fail to decode instead of aborting",
    )


class LoggingSettings(BaseModel):
    """Settings for the structlog pipeline."""

    log_level: str = Field(default="warning", description="Logging level")
    log_dir: Path | None = Field(default=None, description="Directory for log files (none: no files)")


class AppConfig(BaseModel):
    """Top-level application configuration."""

    library: LibrarySettings = Field(default_factory=LibrarySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------


def config_exists(path: Path | None = None) -> bool:
    """Return True if a config file is present on disk."""
    return (path or default_config_path()).is_file()


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from TOML, falling back to defaults if the file is missing."""
    path = path or default_config_path()
    if not path.is_file():
        return AppConfig()

    with open(path, "rb") as f:
        raw = tomllib.load(f)

    return AppConfig.model_validate(raw)
