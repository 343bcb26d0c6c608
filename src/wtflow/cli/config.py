"""Repository configuration stored in `.wtflow.toml` at the repository root.

Read with tomllib; written with tomlkit so that comments and layout in an
existing file survive `wtflow config set`.

Example .wtflow.toml:
  base_branch = "develop"
  remote = "upstream"
  branch_prefix = "fix"
  worktree_pattern = "{repo}.pr{number}"
  worktree_parent = ".."
"""

import tomllib
from collections.abc import MutableMapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, cast

import tomlkit
from tomlkit.exceptions import ParseError

from wtflow.errors import ConfigError
from wtflow.naming import pattern_fields

CONFIG_FILENAME = ".wtflow.toml"


@dataclass(frozen=True)
class WtflowConfig:
    """In-memory representation of `.wtflow.toml` with defaults applied."""

    base_branch: str = "main"
    remote: str = "origin"
    branch_prefix: str = "feat"
    worktree_pattern: str = "{repo}.pr{number}"
    worktree_parent: str = ".."

    def with_overrides(self, **overrides: str | None) -> "WtflowConfig":
        """Return a copy with every non-None override applied (CLI flags win)."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


# Order determines display order in 'wtflow config list'
CONFIG_KEYS: dict[str, str] = {
    "base_branch": "Branch new PR branches are compared against and cut from",
    "remote": "Remote holding the base branch",
    "branch_prefix": "Prefix for generated branch names (<prefix>/<slug>-<MM-DD-HHMM>)",
    "worktree_pattern": "Worktree directory name; supports {repo}, {number}, {branch}",
    "worktree_parent": "Directory worktrees are created in (relative to the repo root)",
}


def config_path_for(repo_root: Path) -> Path:
    return repo_root / CONFIG_FILENAME


def validate_config_value(key: str, value: str) -> None:
    """Check a single key/value pair.

    Raises:
        ConfigError: If the key is unknown or the value is unusable
    """
    if key not in CONFIG_KEYS:
        raise ConfigError(f"Unknown config key '{key}'. Valid keys: {', '.join(CONFIG_KEYS)}")
    if not value.strip():
        raise ConfigError(f"Config key '{key}' must not be empty")
    if key == "worktree_pattern" and not pattern_fields(value):
        raise ConfigError(
            f"worktree_pattern '{value}' must use at least one of {{repo}}, {{number}}, {{branch}}"
        )


def load_config(repo_root: Path) -> WtflowConfig:
    """Load `.wtflow.toml` if present; otherwise return defaults.

    Raises:
        ConfigError: If the file is not valid TOML, has unknown keys, or has
            non-string values
    """
    cfg_path = config_path_for(repo_root)
    if not cfg_path.exists():
        return WtflowConfig()

    try:
        data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {cfg_path}: {e}", config_path=str(cfg_path)) from e

    values: dict[str, str] = {}
    for key, value in data.items():
        if not isinstance(value, str):
            raise ConfigError(
                f"Config key '{key}' in {cfg_path} must be a string, got {type(value).__name__}",
                config_path=str(cfg_path),
            )
        try:
            validate_config_value(key, value)
        except ConfigError as e:
            raise ConfigError(f"{e} ({cfg_path})", config_path=str(cfg_path)) from e
        values[key] = value

    return WtflowConfig(**values)


def config_as_dict(config: WtflowConfig) -> dict[str, str]:
    return {f.name: getattr(config, f.name) for f in fields(config)}


def write_config_value(repo_root: Path, key: str, value: str) -> Path:
    """Set key = value in `.wtflow.toml`, creating the file if needed.

    Preserves existing formatting and comments using tomlkit.

    Returns:
        Path of the written file
    """
    validate_config_value(key, value)
    cfg_path = config_path_for(repo_root)

    if cfg_path.exists():
        with cfg_path.open("r", encoding="utf-8") as f:
            try:
                doc = tomlkit.load(f)
            except ParseError as e:
                raise ConfigError(
                    f"Invalid TOML in {cfg_path}: {e}", config_path=str(cfg_path)
                ) from e
    else:
        doc = tomlkit.document()
        doc.add(tomlkit.comment("wtflow configuration for this repository"))

    assert isinstance(doc, MutableMapping), f"Expected MutableMapping, got {type(doc)}"
    cast(dict[str, Any], doc)[key] = value

    with cfg_path.open("w", encoding="utf-8") as f:
        tomlkit.dump(doc, f)
    return cfg_path
