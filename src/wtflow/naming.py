"""Naming utilities for branch and worktree names.

This module provides pure utility functions for transforming a free-form
description into a sanitized branch name and for expanding the configured
worktree path pattern. All functions are pure (no I/O).
"""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wtflow.cli.config import WtflowConfig

_SAFE_COMPONENT_RE = re.compile(r"[^a-z0-9_/-]+")

# Branch timestamp suffix format: -MM-DD-HHMM (appended after truncation)
BRANCH_TIMESTAMP_SUFFIX_FORMAT = "%m-%d-%H%M"

MAX_BRANCH_COMPONENT_LENGTH = 50

_PATTERN_FIELDS = ("{repo}", "{number}", "{branch}")


def sanitize_branch_component(name: str) -> str:
    """Return a sanitized, predictable branch component from an arbitrary name.

    - Lowercases input
    - Replaces characters outside `[a-z0-9_/-]` with `-`
    - Collapses consecutive `-`
    - Strips leading/trailing `-` and `/`
    - Truncates to 50 characters maximum
    Returns `"work"` if the result is empty.

    Examples:
        >>> sanitize_branch_component("Add OAuth login!")
        "add-oauth-login"
        >>> sanitize_branch_component("fix/bug-123")
        "fix/bug-123"
        >>> sanitize_branch_component("")
        "work"
    """
    lowered = name.strip().lower()
    replaced = _SAFE_COMPONENT_RE.sub("-", lowered)
    collapsed = re.sub(r"-+", "-", replaced)
    trimmed = collapsed.strip("-/")

    if len(trimmed) > MAX_BRANCH_COMPONENT_LENGTH:
        trimmed = trimmed[:MAX_BRANCH_COMPONENT_LENGTH].rstrip("-/")

    return trimmed or "work"


def format_branch_timestamp_suffix(dt: datetime) -> str:
    """Format a datetime as a branch timestamp suffix (e.g. "-01-15-1430")."""
    return f"-{dt.strftime(BRANCH_TIMESTAMP_SUFFIX_FORMAT)}"


def generate_branch_name(prefix: str, description: str, timestamp: datetime) -> str:
    """Build `<prefix>/<slug>-<MM-DD-HHMM>` from a description.

    Examples:
        >>> generate_branch_name("feat", "Add OAuth login", datetime(2024, 1, 15, 14, 30))
        "feat/add-oauth-login-01-15-1430"
    """
    slug = sanitize_branch_component(description)
    suffix = format_branch_timestamp_suffix(timestamp)
    clean_prefix = sanitize_branch_component(prefix) if prefix.strip() else ""
    if clean_prefix:
        return f"{clean_prefix}/{slug}{suffix}"
    return f"{slug}{suffix}"


def generate_worktree_path(
    config: WtflowConfig,
    repo_root: Path,
    repo_name: str,
    *,
    pr_number: int | None,
    branch: str,
) -> Path:
    """Expand the configured worktree pattern into an absolute path.

    `{repo}`, `{number}` and `{branch}` are substituted in
    `config.worktree_pattern`; slashes in the branch become dashes. The result
    is placed under `config.worktree_parent`, which is resolved against the
    repository root when relative.

    Raises:
        ValueError: If the pattern needs `{number}` and no PR number was given
    """
    pattern = config.worktree_pattern
    if "{number}" in pattern and pr_number is None:
        raise ValueError(
            f"Worktree pattern '{pattern}' needs a PR number; pass --pr-number or --worktree-path"
        )

    name = (
        pattern.replace("{repo}", repo_name)
        .replace("{number}", str(pr_number) if pr_number is not None else "")
        .replace("{branch}", branch.replace("/", "-"))
    )

    parent = Path(config.worktree_parent)
    if not parent.is_absolute():
        parent = (repo_root / parent).resolve()
    return parent / name


def pattern_fields(pattern: str) -> list[str]:
    """Return the placeholders a worktree pattern uses, in declaration order."""
    return [field for field in _PATTERN_FIELDS if field in pattern]
