"""Core configuration.

Why here:
- Centralises environment variables (pydantic-settings) away from the CLI.
- Lets adapters (HTTP client, worker pool) read config the same way.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Per-user config directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "clientprojet"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "clientprojet"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "clientprojet"
    return Path.home() / ".config" / "clientprojet"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env file."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# clientprojet user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typed and validated at the edge (env vars) without leaking into the core.
    - One configuration contract shared by the CLI and the adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLIENTPROJET_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_base_url: str = Field(
        default="http://localhost:8080/api/",
        min_length=8,
        description="Base URL of the project-management REST API.",
    )
    http_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Client-side timeout per request (seconds).",
    )
    user_agent: str = Field(
        default="clientprojet/0.1",
        min_length=1,
        description="User-Agent sent with every request.",
    )
    max_workers: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Size of the worker pool used for background communications.",
    )

    username: str | None = Field(
        default=None,
        description="Default username used by the CLI to open a session.",
    )
    password: str | None = Field(
        default=None,
        description="Default password used by the CLI to open a session.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Root log level (DEBUG, INFO, WARNING, ERROR).",
    )
