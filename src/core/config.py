"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) away from the CLI.
- Lets adapters (HTTP, storage) read configuration consistently.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.runtime import Platform


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies).

    Also the home of the device-local storage file, so a packaged build works
    without editing a `.env` inside the project.
    """

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "jobwala-admin"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "jobwala-admin"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "jobwala-admin"
    return Path.home() / ".config" / "jobwala-admin"


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


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global `.env`."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        try:
            existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError):
            existing = {}

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# jobwala-admin user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Central application configuration.

    Why pydantic-settings:
    - Typing + validation at the edge (env vars) without leaking into the core.
    - One configuration contract shared by the CLI and the adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="JOBWALA_",
        extra="ignore",
        case_sensitive=False,
        # Order: project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    # Endpoint resolution
    api_url: str | None = Field(
        default=None,
        description="Explicit full base URL (e.g. https://api.example.com/api). Wins over everything.",
    )
    api_host: str | None = Field(
        default=None,
        description="Host-only override for mobile runtimes (LAN IP of the dev machine).",
    )
    api_port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Backend port combined with default or host-only hosts.",
    )
    api_path_prefix: str = Field(
        default="/api",
        description="Path prefix appended to host-based URLs.",
    )
    platform: Platform | None = Field(
        default=None,
        description="Force the runtime (web/android/ios). None detects it.",
    )
    web_origin: str | None = Field(
        default=None,
        description="Origin the web build is served from.",
    )

    # Request policy
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout per attempt (seconds).",
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per logical call, first attempt included.",
    )
    backoff_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Linear backoff unit: wait backoff_seconds * attempt between attempts.",
    )
    user_agent: str = Field(
        default="jobwala-admin/0.1",
        min_length=1,
        description="User-Agent sent with every request.",
    )

    # Device-local state
    storage_path: Path | None = Field(
        default=None,
        description="JSON file holding the token and cached user profile.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Level for the `jobwala` logger.",
    )

    def resolved_storage_path(self) -> Path:
        return self.storage_path or get_user_config_dir() / "storage.json"
