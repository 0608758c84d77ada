"""Settings loaded from environment variables.

Every setting can be overridden on the command line (see ``aiya_todo_mcp.cli``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

ENV_PREFIX = "AIYA_TODO"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    todo_file: Path = Path("./todos.json")
    log_level: str = "INFO"
    log_file: Path | None = None
    # Re-raise snapshot write failures to the caller instead of only logging them.
    strict_durability: bool = False

    def with_overrides(self, **overrides: object) -> Settings:
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_settings() -> Settings:
    """Build settings from ``AIYA_TODO_*`` environment variables."""
    defaults = Settings()
    return Settings(
        todo_file=_env_path(_k("FILE"), defaults.todo_file) or defaults.todo_file,
        log_level=_env(_k("LOG_LEVEL"), defaults.log_level).strip().upper() or defaults.log_level,
        log_file=_env_path(_k("LOG_FILE"), None),
        strict_durability=_env_bool(_k("STRICT_DURABILITY"), defaults.strict_durability),
    )
