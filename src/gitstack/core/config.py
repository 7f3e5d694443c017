"""Per-repository configuration from the [tool.gitstack] table of pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from gitstack.core.errors import ConfigError

DEFAULT_DB_FILENAME = "stack.db"


@dataclass(frozen=True)
class StackConfig:
    """Repository-level settings.

    base_branch only seeds the stored repo metadata on first open; the stored
    value stays authoritative afterwards.
    """

    base_branch: str | None = None
    base_remote: str | None = None
    db_filename: str = DEFAULT_DB_FILENAME


def _optional_str(section: dict[str, Any], key: str) -> str | None:
    value = section.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or not value:
        raise ConfigError(f"[tool.gitstack] {key} must be a non-empty string")
    return value


def load_config(repo_root: Path) -> StackConfig:
    """Load [tool.gitstack] from repo_root/pyproject.toml, or defaults if absent."""
    pyproject = repo_root / "pyproject.toml"
    if not pyproject.exists():
        return StackConfig()

    try:
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"failed to parse {pyproject}: {e}") from e

    section = data.get("tool", {}).get("gitstack", {})
    if not isinstance(section, dict):
        raise ConfigError("[tool.gitstack] must be a table")

    db_filename = _optional_str(section, "db_filename") or DEFAULT_DB_FILENAME
    if "/" in db_filename or "\\" in db_filename:
        raise ConfigError("[tool.gitstack] db_filename must be a bare file name")

    return StackConfig(
        base_branch=_optional_str(section, "base_branch"),
        base_remote=_optional_str(section, "base_remote"),
        db_filename=db_filename,
    )
