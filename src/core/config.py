"""Core configuration.

Why here:
- Environment variables are read in one place (pydantic-settings), not in the CLI.
- Adapters (cdsctl, HTTP) read the same settings object.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "cds-explorer"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "cds-explorer"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "cds-explorer"
    return Path.home() / ".config" / "cds-explorer"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def expand_config_path(path: Path | str) -> Path:
    """Expand `~` and environment variables in a configured cdsrc path."""

    return Path(os.path.expandvars(os.path.expanduser(str(path))))


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typed, validated env vars at the edge; no parsing logic in the Core.
    - One configuration contract shared by the CLI and the adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="CDS_EXPLORER_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first (dev), then the per-user one.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    cdsrcs: list[Path] = Field(
        default_factory=lambda: [Path("~/.cdsrc")],
        description="Ordered list of cdsctl TOML configuration files.",
    )
    cdsctl_path: str = Field(
        default="cdsctl",
        min_length=1,
        description="cdsctl executable (name on PATH or absolute path).",
    )
    command_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Optional timeout per cdsctl invocation (seconds).",
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for doctor connectivity checks (seconds).",
    )
    log_level: str = Field(
        default="WARNING",
        description="Root log level for the CLI (DEBUG, INFO, WARNING, ...).",
    )
    tree_depth: int = Field(
        default=3,
        ge=1,
        le=12,
        description="Default number of levels expanded by `tree`.",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        return value.strip().upper() or "WARNING"

    def config_files(self) -> list[Path]:
        return [expand_config_path(p) for p in self.cdsrcs]
